"""Command request data types for the fsck CLI."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FsckCommand:
    """Check a path (the `fsck <path> [options]` invocation)."""

    path: str
    move: bool = False
    delete: bool = False
    open_for_write: bool = False
    list_corrupt_files: bool = False
    show_files: bool = False
    show_blocks: bool = False
    show_locations: bool = False
    debug: bool = False
