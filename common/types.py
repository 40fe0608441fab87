"""Shared data type definitions (NamespaceEntry, FileRecord, BlockRecord, ReplicaLocation)."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


class EntryKind(str, Enum):
    """Kind of a namespace entry."""
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class NamespaceEntry:
    """
    A file or directory known to the namespace service.
    """
    path: str
    kind: EntryKind

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1] or "/"

    @property
    def is_dir(self) -> bool:
        return self.kind == EntryKind.DIRECTORY


@dataclass(frozen=True)
class ReplicaLocation:
    """
    One stored copy of a block on a storage node.

    A replica is live when its node is reachable and the node has not
    marked the copy corrupt.
    """
    node_id: str
    length: int
    live: bool = True
    corrupt: bool = False


@dataclass(frozen=True)
class BlockRecord:
    """
    Metadata for a single block of a file.

    ``corrupt`` is set by the namespace service once every listed replica
    has been reported bad.
    """
    block_id: str
    length: int
    replicas: Tuple[ReplicaLocation, ...] = ()
    corrupt: bool = False


@dataclass(frozen=True)
class FileRecord:
    """
    Everything the checker needs to judge one file.
    """
    path: str
    length: int
    replication: int
    blocks: Tuple[BlockRecord, ...] = field(default_factory=tuple)
    open_for_write: bool = False
    modification_time: float = 0.0
