"""Quarantine mover: relocates corrupt files into the lost+found subtree."""

from typing import Callable, List, Optional

from common.constants import QUARANTINE_DIR
from common.logging_config import get_logger
from common.paths import is_under, join_path, normalize_path, parent_path, split_path
from common.types import NamespaceEntry
from fsck.exceptions import QuarantineError
from fsck.metadata import MetadataService

logger = get_logger(__name__)

DEFAULT_MAX_SUFFIX = 64


def _first_conflict(
    segments: List[str],
    lookup: Callable[[str], Optional[NamespaceEntry]],
    start: int,
) -> Optional[int]:
    """
    Find the first segment at or after ``start`` that keeps ``segments`` from being created.

    A conflict is an existing leaf or an ancestor that exists but is not a
    directory. Returns None if the path is free.
    """
    for index in range(start, len(segments)):
        entry = lookup(join_path(segments[:index + 1]))
        if entry is None:
            return None
        if index == len(segments) - 1 or not entry.is_dir:
            return index
    return None


def compute_destination(
    path: str,
    lookup: Callable[[str], Optional[NamespaceEntry]],
    quarantine_dir: str = QUARANTINE_DIR,
    max_suffix: int = DEFAULT_MAX_SUFFIX,
) -> str:
    """
    Compute where a corrupt file should land inside the quarantine directory.

    The file keeps its original path below the quarantine root
    (``/a/b/f`` -> ``/lost+found/a/b/f``). If that name is taken, or one of
    its would-be parents is already a file (an earlier quarantined ``/a``),
    ``.1``, ``.2``, ... are appended to the first conflicting segment until
    a free path is found (``/lost+found/a.1/b/f``).

    Args:
        path: Absolute path of the corrupt file
        lookup: Returns the entry at a path, or None if it does not exist
        quarantine_dir: Quarantine root
        max_suffix: Highest disambiguating suffix to try

    Returns:
        Free destination path

    Raises:
        QuarantineError: If the file is already quarantined or every candidate is taken
    """
    quarantine_dir = normalize_path(quarantine_dir)
    if is_under(path, quarantine_dir):
        raise QuarantineError(f"'{path}' is already inside {quarantine_dir}")

    root_depth = len(split_path(quarantine_dir))
    base = split_path(quarantine_dir) + split_path(path)
    conflict = _first_conflict(base, lookup, root_depth)
    if conflict is None:
        return join_path(base)

    for suffix in range(1, max_suffix + 1):
        candidate = base[:conflict] + [f"{base[conflict]}.{suffix}"] + base[conflict + 1:]
        if _first_conflict(candidate, lookup, conflict) is None:
            return join_path(candidate)
    raise QuarantineError(
        f"No free quarantine name for '{path}' after {max_suffix} attempts"
    )


class QuarantineMover:
    """
    Moves corrupt files into the quarantine subtree by renaming them.

    Only the path-to-file mapping changes; block data is never copied,
    repaired or deleted. Each move is a single rename on the namespace
    service and is not rolled back if a later move fails.
    """

    def __init__(
        self,
        metadata: MetadataService,
        quarantine_dir: str = QUARANTINE_DIR,
        max_suffix: int = DEFAULT_MAX_SUFFIX,
    ):
        self.metadata = metadata
        self.quarantine_dir = normalize_path(quarantine_dir)
        self.max_suffix = max_suffix

    def destination_for(self, path: str) -> str:
        return compute_destination(path, self.metadata.resolve, self.quarantine_dir, self.max_suffix)

    def move(self, path: str) -> str:
        """
        Move one file into quarantine.

        Args:
            path: Absolute path of the corrupt file

        Returns:
            The file's new path

        Raises:
            QuarantineError: If no destination is free or the service refuses the rename
        """
        destination = self.destination_for(path)
        parent = parent_path(destination)
        if not self.metadata.mkdirs(parent):
            raise QuarantineError(f"Cannot create quarantine directory {parent}")
        if not self.metadata.rename(path, destination):
            raise QuarantineError(f"Failed to move '{path}' to '{destination}'")
        logger.info(f"Moved corrupt file {path} to {destination}")
        return destination


class CorruptFileDeleter:
    """Removes corrupt files from the namespace (the ``-delete`` mode)."""

    def __init__(self, metadata: MetadataService):
        self.metadata = metadata

    def delete(self, path: str) -> None:
        if not self.metadata.delete(path):
            raise QuarantineError(f"Failed to delete '{path}'")
        logger.info(f"Deleted corrupt file {path}")
