"""Command-line parser for the fsck CLI."""

from typing import List

from cli.constants import OPTION_FLAGS
from cli.models import FsckCommand


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_args(args: List[str]) -> FsckCommand:
    """Parse command-line arguments into an FsckCommand.

    Options use the single-dash long form (``-move``, ``-openforwrite``) and
    may appear before or after the path.

    Args:
        args: Arguments without the program name

    Returns:
        FsckCommand describing the invocation

    Raises:
        ParseError: If the path is missing, repeated, or an option is unknown or conflicting
    """
    path = None
    flags = {}

    for arg in args:
        if arg.startswith("-"):
            field = OPTION_FLAGS.get(arg)
            if field is None:
                raise ParseError(f"Unknown option: {arg}")
            flags[field] = True
        elif path is None:
            path = arg
        else:
            raise ParseError(f"Only one path may be checked, got '{path}' and '{arg}'")

    if path is None:
        raise ParseError("fsck requires a path")
    if not path.startswith("/"):
        raise ParseError(f"Path must be absolute: '{path}'")
    if flags.get("move") and flags.get("delete"):
        raise ParseError("-move and -delete cannot be combined")
    if flags.get("show_blocks") and not flags.get("show_files"):
        raise ParseError("-blocks requires -files")
    if flags.get("show_locations") and not flags.get("show_blocks"):
        raise ParseError("-locations requires -blocks")

    return FsckCommand(path=path, **flags)
