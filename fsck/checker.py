"""Checker orchestration: one fsck invocation over one subtree."""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from common.constants import QUARANTINE_DIR
from common.logging_config import get_logger
from common.paths import normalize_path
from common.types import NamespaceEntry
from fsck.evaluator import FileHealth, evaluate
from fsck.exceptions import (
    InvalidArgumentError,
    MalformedBlockError,
    MetadataUnavailableError,
    PathNotFoundError,
    QuarantineError,
)
from fsck.lister import CorruptFileLister, build_summary_for_corrupt_files
from fsck.metadata import MetadataService
from fsck.quarantine import CorruptFileDeleter, QuarantineMover
from fsck.report import (
    FAILURE_STATUS,
    ClusterSummary,
    FsckStatus,
    SummaryReportBuilder,
    status_line,
)
from fsck.walker import NamespaceWalker

logger = get_logger(__name__)


@dataclass(frozen=True)
class FsckOptions:
    """
    Options of one checker invocation.

    Raises:
        InvalidArgumentError: On a relative path or an unsupported option combination
    """
    path: str
    move: bool = False
    delete: bool = False
    open_for_write: bool = False
    list_corrupt_files: bool = False
    show_files: bool = False
    show_blocks: bool = False
    show_locations: bool = False
    quarantine_dir: str = QUARANTINE_DIR

    def __post_init__(self):
        try:
            object.__setattr__(self, "path", normalize_path(self.path))
            object.__setattr__(self, "quarantine_dir", normalize_path(self.quarantine_dir))
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e
        if self.move and self.delete:
            raise InvalidArgumentError("-move and -delete cannot be combined")


@dataclass
class FsckResult:
    """
    Outcome of one invocation: the verdict, the rendered report and the exit code.
    """
    status: FsckStatus
    output: str
    summary: Optional[ClusterSummary] = None
    corrupt_files: List[str] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return self.status.exit_code


class NamespaceChecker:
    """
    Runs one bounded, single-threaded pass over a subtree.

    Reads are side-effect free and safe to repeat; only the move and delete
    modes mutate the namespace, one independent rename or delete per file.
    """

    def __init__(self, metadata: MetadataService, options: FsckOptions):
        self.metadata = metadata
        self.options = options
        self.walker = NamespaceWalker(metadata, options.quarantine_dir)
        self.mover = QuarantineMover(metadata, options.quarantine_dir)
        self.deleter = CorruptFileDeleter(metadata)

    def run(self) -> FsckResult:
        """
        Check the configured path and produce exactly one verdict.

        Health problems yield CORRUPT; a missing root, malformed metadata,
        failed moves or an unreachable namespace service yield FAILURE.
        """
        path = self.options.path
        started = time.time()
        logger.info(f"FSCK started for path {path}")
        try:
            if self.options.list_corrupt_files:
                result = self._list_corrupt()
            else:
                result = self._check()
        except PathNotFoundError as e:
            logger.warning(str(e))
            result = self._failure(str(e))
        except MetadataUnavailableError as e:
            logger.error(f"Namespace service unavailable during fsck of {path}: {e}")
            result = self._failure(f"Namespace service unavailable: {e}")
        logger.info(
            f"FSCK ended for path {path}: {result.status.value} "
            f"in {(time.time() - started) * 1000:.0f} milliseconds"
        )
        return result

    def _failure(self, message: str) -> FsckResult:
        output = f"{message}\n\n\n{status_line(FsckStatus.FAILURE, self.options.path)}\n"
        return FsckResult(status=FsckStatus.FAILURE, output=output)

    def _check(self) -> FsckResult:
        options = self.options
        builder = SummaryReportBuilder(
            options.path,
            show_files=options.show_files,
            show_blocks=options.show_blocks,
            show_locations=options.show_locations,
            show_open_files=options.open_for_write,
        )
        corrupt_files = []
        for entry in self.walker.walk(options.path):
            if entry.is_dir:
                builder.add_directory(entry)
                continue
            health = self._check_file(entry, builder)
            if health is not None and health.is_corrupt:
                corrupt_files.append(entry.path)

        output = builder.render()
        summary = builder.summary
        return FsckResult(
            status=summary.status,
            output=output,
            summary=summary,
            corrupt_files=corrupt_files,
        )

    def _check_file(self, entry: NamespaceEntry, builder: SummaryReportBuilder) -> Optional[FileHealth]:
        try:
            record = self.metadata.get_block_locations(entry.path)
        except PathNotFoundError:
            logger.info(f"File {entry.path} vanished during the walk, skipping")
            return None
        try:
            health = evaluate(record, self.options.open_for_write)
        except MalformedBlockError as e:
            builder.add_failure(entry.path, str(e))
            return None

        builder.add_file(health)
        if health.is_corrupt and not health.open_for_write:
            self._handle_corrupt(entry.path, builder)
        return health

    def _handle_corrupt(self, path: str, builder: SummaryReportBuilder) -> None:
        try:
            if self.options.move:
                destination = self.mover.move(path)
                builder.add_moved(path, destination)
            elif self.options.delete:
                self.deleter.delete(path)
                builder.add_deleted(path)
        except QuarantineError as e:
            builder.add_failure(path, str(e))

    def _list_corrupt(self) -> FsckResult:
        """
        Listing mode: corrupt paths, then the summary sentence.

        A run with failures ends with the FAILURE status line instead of the
        summary sentence, so the output carries a single status marker.
        """
        options = self.options
        lister = CorruptFileLister(
            self.metadata,
            open_for_write_visible=options.open_for_write,
            quarantine_dir=options.quarantine_dir,
        )
        corrupt_files = lister.list_corrupt(options.path)

        actions = []
        failures = [f"{path}: {FAILURE_STATUS} malformed block metadata" for path in lister.malformed]
        for path in corrupt_files:
            if path in lister.open_files:
                continue
            try:
                if options.move:
                    actions.append(f"Moved {path} to {self.mover.move(path)}")
                elif options.delete:
                    self.deleter.delete(path)
                    actions.append(f"Deleted {path}")
            except QuarantineError as e:
                logger.warning(str(e))
                failures.append(f"{path}: {FAILURE_STATUS} {e}")

        lines = list(corrupt_files)
        if failures:
            status = FsckStatus.FAILURE
            lines.extend(actions)
            lines.extend(failures)
            lines.append("")
            lines.append(status_line(status, options.path))
        else:
            status = FsckStatus.CORRUPT if corrupt_files else FsckStatus.HEALTHY
            if lines:
                lines.append("")
            lines.append(build_summary_for_corrupt_files(len(corrupt_files), options.path))
            lines.extend(actions)

        return FsckResult(
            status=status,
            output="\n".join(lines) + "\n",
            corrupt_files=corrupt_files,
        )
