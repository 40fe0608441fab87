"""Depth-first traversal of a namespace subtree."""

from typing import Iterator, List, Optional

from common.constants import QUARANTINE_DIR
from common.logging_config import get_logger
from common.paths import is_under, normalize_path
from common.types import NamespaceEntry
from fsck.exceptions import PathNotFoundError
from fsck.metadata import MetadataService

logger = get_logger(__name__)


class NamespaceWalker:
    """
    Enumerates a file or directory depth first in a stable order.

    Children are visited in lexicographic order of their names, so repeated
    walks over an unchanged tree produce entries in the same order. The
    walker keeps one child iterator per open directory level; nothing is
    accumulated across the tree. A directory removed after it was listed
    (e.g., moved by a concurrent run) contributes no children.
    """

    def __init__(self, metadata: MetadataService, quarantine_dir: Optional[str] = QUARANTINE_DIR):
        """
        Args:
            metadata: Namespace service to query
            quarantine_dir: Subtree to leave out of walks (None walks everything)
        """
        self.metadata = metadata
        self.quarantine_dir = normalize_path(quarantine_dir) if quarantine_dir else None

    def resolve_root(self, path: str) -> NamespaceEntry:
        """
        Resolve the walk root.

        Raises:
            PathNotFoundError: If the path does not exist
        """
        entry = self.metadata.resolve(normalize_path(path))
        if entry is None:
            raise PathNotFoundError(path)
        return entry

    def _skip(self, entry: NamespaceEntry, root: NamespaceEntry) -> bool:
        if self.quarantine_dir is None or not entry.is_dir:
            return False
        if is_under(root.path, self.quarantine_dir):
            return False
        return entry.path == self.quarantine_dir

    def _sorted_children(self, entry: NamespaceEntry) -> List[NamespaceEntry]:
        try:
            children = self.metadata.list_children(entry.path)
        except PathNotFoundError:
            logger.info(f"Directory {entry.path} vanished during the walk")
            return []
        return sorted(children, key=lambda child: child.name)

    def walk(self, path: str) -> Iterator[NamespaceEntry]:
        """
        Yield every entry of the subtree rooted at ``path``, the root first.

        Directories are yielded before their children. The quarantine
        subtree is skipped unless the walk starts inside it.

        Raises:
            PathNotFoundError: If ``path`` does not exist
        """
        root = self.resolve_root(path)
        logger.debug(f"Walking {root.path}")
        yield root
        if not root.is_dir:
            return

        stack = [iter(self._sorted_children(root))]
        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue
            if self._skip(entry, root):
                logger.debug(f"Skipping quarantine directory {entry.path}")
                continue
            yield entry
            if entry.is_dir:
                stack.append(iter(self._sorted_children(entry)))
