"""Corrupt-file listing mode."""

from typing import List, Optional, Set

from common.constants import QUARANTINE_DIR
from common.logging_config import get_logger
from common.paths import is_under, normalize_path
from common.types import FileRecord
from fsck.evaluator import evaluate
from fsck.exceptions import InvalidArgumentError, MalformedBlockError, PathNotFoundError
from fsck.metadata import MetadataService
from fsck.report import CORRUPT_STATUS, HEALTHY_STATUS
from fsck.walker import NamespaceWalker

logger = get_logger(__name__)


def build_summary_for_corrupt_files(count: int, path: str) -> str:
    """
    Build the closing sentence of a corrupt-file listing.

    Args:
        count: Number of corrupt files found under ``path``
        path: Path that was listed

    Returns:
        Summary sentence for zero, one or many corrupt files

    Raises:
        InvalidArgumentError: If ``count`` is negative
    """
    if count < 0:
        raise InvalidArgumentError(f"Corrupt file count must not be negative: {count}")
    if count == 0:
        return (
            f"Unable to locate any corrupt files under '{path}'.\n\n"
            f"Please run a complete fsck to confirm if '{path}' {HEALTHY_STATUS}"
        )
    if count == 1:
        return f"There is at least 1 corrupt file under '{path}', which {CORRUPT_STATUS}"
    return f"There are at least {count} corrupt files under '{path}', which {CORRUPT_STATUS}"


summarize = build_summary_for_corrupt_files


class CorruptFileLister:
    """
    Lists files under a path that have at least one corrupt or missing block.

    The lister's own walk is cross-checked against the namespace service's
    corrupt-file index; index entries are only trusted if they lie under the
    listed path and still resolve to a file. Index entries for files open for
    write are dropped unless open files were requested.
    """

    def __init__(
        self,
        metadata: MetadataService,
        open_for_write_visible: bool = False,
        quarantine_dir: Optional[str] = QUARANTINE_DIR,
    ):
        self.metadata = metadata
        self.open_for_write_visible = open_for_write_visible
        self.quarantine_dir = quarantine_dir
        self.walker = NamespaceWalker(metadata, quarantine_dir)
        self.malformed: List[str] = []
        self.open_files: Set[str] = set()

    def _from_walk(self, root: str) -> List[str]:
        found = []
        for entry in self.walker.walk(root):
            if entry.is_dir:
                continue
            try:
                record = self.metadata.get_block_locations(entry.path)
            except PathNotFoundError:
                logger.info(f"File {entry.path} vanished during the walk, skipping")
                continue
            try:
                health = evaluate(record, self.open_for_write_visible)
            except MalformedBlockError as e:
                logger.warning(str(e))
                self.malformed.append(entry.path)
                continue
            if health.is_corrupt:
                found.append(entry.path)
                if health.open_for_write:
                    self.open_files.add(entry.path)
        return found

    def _current_record(self, path: str) -> Optional[FileRecord]:
        entry = self.metadata.resolve(path)
        if entry is None or entry.is_dir:
            return None
        try:
            return self.metadata.get_block_locations(path)
        except PathNotFoundError:
            return None

    def _from_index(self, root: str, already: set) -> List[str]:
        extra = []
        walk_in_quarantine = self.quarantine_dir is not None and is_under(root, self.quarantine_dir)
        for path in self.metadata.list_corrupt_files():
            if path in already or not is_under(path, root):
                continue
            if self.quarantine_dir and not walk_in_quarantine and is_under(path, self.quarantine_dir):
                continue
            record = self._current_record(path)
            if record is None:
                logger.debug(f"Ignoring stale corrupt-file index entry {path}")
                continue
            if record.open_for_write:
                if not self.open_for_write_visible:
                    logger.debug(f"Ignoring corrupt-file index entry {path}: open for write")
                    continue
                self.open_files.add(path)
            logger.debug(f"Corrupt file {path} reported by the namespace index only")
            extra.append(path)
        return extra

    def list_corrupt(self, path: str) -> List[str]:
        """
        Return the sorted paths of corrupt files under ``path``.

        Files open for write are left out unless the lister was created with
        ``open_for_write_visible``; listed open files are kept in ``open_files``.

        Raises:
            PathNotFoundError: If ``path`` does not exist
        """
        root = normalize_path(path)
        self.malformed = []
        self.open_files = set()
        found = self._from_walk(root)
        found.extend(self._from_index(root, set(found)))
        logger.info(f"Found {len(found)} corrupt file(s) under {root}")
        return sorted(found)

    def render(self, path: str, corrupt_files: List[str]) -> str:
        """Render the listing: one path per line followed by the summary sentence."""
        lines = list(corrupt_files)
        if lines:
            lines.append("")
        lines.append(build_summary_for_corrupt_files(len(corrupt_files), path))
        return "\n".join(lines) + "\n"
