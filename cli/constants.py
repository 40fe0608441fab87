"""CLI constants."""

PROG_NAME = "redcloud-fsck"

OPTION_FLAGS = {
    "-move": "move",
    "-delete": "delete",
    "-openforwrite": "open_for_write",
    "-list-corruptfiles": "list_corrupt_files",
    "-files": "show_files",
    "-blocks": "show_blocks",
    "-locations": "show_locations",
    "--debug": "debug",
}

USAGE_TEXT = f"""Usage: {PROG_NAME} <path> [-list-corruptfiles | -move | -delete | -openforwrite] [-files [-blocks [-locations]]] [--debug]
  <path>              start checking from this path
  -move               move corrupted files to /lost+found
  -delete             delete corrupted files
  -files              print out files being checked
  -openforwrite       print out files opened for write
  -list-corruptfiles  print out list of missing blocks and files they belong to
  -blocks             print out block report
  -locations          print out locations for every block
  --debug             enable debug logging

Exit status: 0 healthy, 1 corrupt, -1 (255) failure.
Please note that:
  1. By default fsck ignores files opened for write, use -openforwrite to report such files.
  2. -move and -delete cannot be combined."""
