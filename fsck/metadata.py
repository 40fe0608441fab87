"""Metadata query interface consumed by the checker."""

from typing import List, Optional, Protocol, runtime_checkable

from common.types import FileRecord, NamespaceEntry


@runtime_checkable
class MetadataService(Protocol):
    """
    Read (and narrow write) access to the namespace service.

    Reads may return a snapshot that lags real time; all reads are safe to
    repeat. Implementations raise MetadataUnavailableError when the service
    cannot be reached.
    """

    def resolve(self, path: str) -> Optional[NamespaceEntry]:
        """Return the entry at ``path`` or None if it does not exist."""
        ...

    def list_children(self, path: str) -> List[NamespaceEntry]:
        """Return the children of a directory."""
        ...

    def get_block_locations(self, path: str) -> FileRecord:
        """Return the block layout, replica state and lease state of a file."""
        ...

    def rename(self, src: str, dst: str) -> bool:
        """Atomically rename one entry; False if the service refused."""
        ...

    def mkdirs(self, path: str) -> bool:
        """Create a directory and any missing parents."""
        ...

    def delete(self, path: str) -> bool:
        """Remove a file entry from the namespace."""
        ...

    def list_corrupt_files(self) -> List[str]:
        """Return the service's cached index of files with corrupt blocks."""
        ...
