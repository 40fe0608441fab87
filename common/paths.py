"""Segment-based path helpers for namespace paths."""

from typing import List

from common.constants import PATH_SEPARATOR, ROOT_PATH


def split_path(path: str) -> List[str]:
    """
    Split an absolute namespace path into its name segments.

    Args:
        path: Absolute path (e.g., "/audio/audio1")

    Returns:
        List of segments (e.g., ["audio", "audio1"]); the root yields []

    Raises:
        ValueError: If the path is not absolute or contains '.'/'..' segments
    """
    if not path or not path.startswith(PATH_SEPARATOR):
        raise ValueError(f"Path must be absolute: '{path}'")

    segments = [s for s in path.split(PATH_SEPARATOR) if s]
    for segment in segments:
        if segment in (".", ".."):
            raise ValueError(f"Relative segment '{segment}' not allowed in '{path}'")
    return segments


def join_path(segments: List[str]) -> str:
    """Build an absolute path from name segments."""
    return PATH_SEPARATOR + PATH_SEPARATOR.join(segments)


def normalize_path(path: str) -> str:
    """Collapse duplicate and trailing separators ("//a/b/" -> "/a/b")."""
    return join_path(split_path(path))


def parent_path(path: str) -> str:
    """Return the parent directory of a path (the root is its own parent)."""
    segments = split_path(path)
    return join_path(segments[:-1])


def child_path(parent: str, name: str) -> str:
    """Append one name segment to a directory path."""
    if parent == ROOT_PATH:
        return PATH_SEPARATOR + name
    return parent + PATH_SEPARATOR + name


def is_under(path: str, root: str) -> bool:
    """
    Check whether ``path`` equals ``root`` or lies below it.

    Comparison is done on whole segments, so "/audiobook" is not under
    "/audio".
    """
    path_segments = split_path(path)
    root_segments = split_path(root)
    return path_segments[:len(root_segments)] == root_segments
