"""CLI entry point."""

import sys
from typing import List, Optional

from common.logging_config import setup_logging
from cli.config import Config
from cli.constants import USAGE_TEXT
from cli.metadata_client import MetadataClient
from cli.parser import ParseError, parse_args
from fsck.checker import FsckOptions, NamespaceChecker
from fsck.exceptions import InvalidArgumentError
from fsck.report import EXIT_FAILURE, FsckStatus, status_line


def main(argv: Optional[List[str]] = None, config: Optional[Config] = None) -> int:
    """
    Run one fsck over the namespace service and print its report.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:])
        config: Configuration (defaults to ~/.redcloud/fsck.json)

    Returns:
        0 if healthy, 1 if corrupt, -1 on failure or usage error
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    if '-h' in argv or '--help' in argv:
        print(USAGE_TEXT)
        return 0

    config = config or Config()
    log_level = 'DEBUG' if '--debug' in argv else config.get_log_level()
    logger = setup_logging('cli', log_level=log_level, stream=sys.stderr)
    setup_logging('fsck', log_level=log_level, stream=sys.stderr)
    if '--debug' in argv:
        logger.info("Debug logging enabled")

    try:
        command = parse_args(argv)
        options = FsckOptions(
            path=command.path,
            move=command.move,
            delete=command.delete,
            open_for_write=command.open_for_write,
            list_corrupt_files=command.list_corrupt_files,
            show_files=command.show_files,
            show_blocks=command.show_blocks,
            show_locations=command.show_locations,
            quarantine_dir=config.get_quarantine_dir(),
        )
    except (ParseError, InvalidArgumentError) as e:
        print(f"fsck: {e}", file=sys.stderr)
        print(USAGE_TEXT, file=sys.stderr)
        return EXIT_FAILURE

    client = MetadataClient(config)
    try:
        result = NamespaceChecker(client, options).run()
    except Exception as e:
        logger.error(f"fsck error: {e}", exc_info=True)
        print(f"fsck error: {e}\n\n\n{status_line(FsckStatus.FAILURE, options.path)}")
        return EXIT_FAILURE
    finally:
        client.close()

    print(result.output, end='')
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
