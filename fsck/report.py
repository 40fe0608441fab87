"""Summary report builder: cluster-wide counters, per-file detail and the final verdict."""

import io
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, TextIO

from common.logging_config import get_logger
from common.types import NamespaceEntry
from common.utils import format_file_size, percent
from fsck.evaluator import BlockHealth, FileHealth, HealthVerdict

logger = get_logger(__name__)

HEALTHY_STATUS = "is HEALTHY"
CORRUPT_STATUS = "is CORRUPT"
FAILURE_STATUS = "FAILURE"

EXIT_HEALTHY = 0
EXIT_CORRUPT = 1
EXIT_FAILURE = -1

OPEN_FOR_WRITE_TOKEN = "OPENFORWRITE"


class FsckStatus(str, Enum):
    """Verdict of one checker invocation."""
    HEALTHY = "HEALTHY"
    CORRUPT = "CORRUPT"
    FAILURE = "FAILURE"

    @property
    def exit_code(self) -> int:
        return {
            FsckStatus.HEALTHY: EXIT_HEALTHY,
            FsckStatus.CORRUPT: EXIT_CORRUPT,
            FsckStatus.FAILURE: EXIT_FAILURE,
        }[self]


def status_line(status: FsckStatus, path: str) -> str:
    """
    Build the terminal status line for a run.

    The line carries exactly one of the greppable markers.
    """
    if status == FsckStatus.HEALTHY:
        return f"The filesystem under path '{path}' {HEALTHY_STATUS}"
    if status == FsckStatus.CORRUPT:
        return f"The filesystem under path '{path}' {CORRUPT_STATUS}"
    return f"The filesystem check under path '{path}' ended in {FAILURE_STATUS}"


@dataclass
class ClusterSummary:
    """
    Aggregate counters for one walk.
    """
    total_files: int = 0
    total_dirs: int = 0
    total_blocks: int = 0
    total_size: int = 0
    total_replicas: int = 0
    min_replication: Optional[int] = None
    corrupt_blocks: int = 0
    missing_blocks: int = 0
    missing_size: int = 0
    under_replicated_blocks: int = 0
    over_replicated_blocks: int = 0
    minimally_replicated_blocks: int = 0
    missing_replicas: int = 0
    open_files: int = 0
    open_files_blocks: int = 0
    open_files_size: int = 0
    corrupt_files: int = 0
    failed_files: int = 0
    moved_files: int = 0
    deleted_files: int = 0

    @property
    def average_replication(self) -> float:
        if self.total_blocks == 0:
            return 0.0
        return self.total_replicas / self.total_blocks

    @property
    def status(self) -> FsckStatus:
        if self.failed_files > 0:
            return FsckStatus.FAILURE
        if self.corrupt_blocks > 0 or self.missing_blocks > 0 or self.corrupt_files > 0:
            return FsckStatus.CORRUPT
        return FsckStatus.HEALTHY


class SummaryReportBuilder:
    """
    Accumulates walk outcomes and renders the plain-text report.

    Per-file lines are written as outcomes arrive; the summary and status
    line are appended by ``render()``. Output contains no timestamps, so an
    unchanged tree yields a byte-identical report.
    """

    def __init__(
        self,
        path: str,
        show_files: bool = False,
        show_blocks: bool = False,
        show_locations: bool = False,
        show_open_files: bool = False,
        out: Optional[TextIO] = None,
    ):
        self.path = path
        self.show_files = show_files
        self.show_blocks = show_blocks
        self.show_locations = show_locations
        self.show_open_files = show_open_files
        self.out = out if out is not None else io.StringIO()
        self._summary = ClusterSummary()
        self._finalized: Optional[ClusterSummary] = None

    @property
    def summary(self) -> ClusterSummary:
        return self._finalized if self._finalized is not None else self._summary

    def _check_open(self) -> None:
        if self._finalized is not None:
            raise RuntimeError("Report already finalized")

    def _write(self, line: str) -> None:
        self.out.write(line + "\n")

    def add_directory(self, entry: NamespaceEntry) -> None:
        self._check_open()
        self._summary.total_dirs += 1
        if self.show_files:
            self._write(f"{entry.path} <dir>")

    def add_file(self, health: FileHealth) -> None:
        """Fold one evaluated file into the counters and emit its detail lines."""
        self._check_open()
        record = health.record
        s = self._summary

        if health.skipped:
            s.open_files += 1
            s.open_files_blocks += len(record.blocks)
            s.open_files_size += record.length
            return

        s.total_files += 1
        s.total_size += record.length
        s.total_blocks += len(health.blocks)
        if health.open_for_write:
            s.open_files += 1

        for detail in health.blocks:
            self._count_block(detail)
        if health.is_corrupt:
            s.corrupt_files += 1

        if self.show_files or health.verdict != HealthVerdict.HEALTHY or (
            self.show_open_files and health.open_for_write
        ):
            self._write_file_detail(health)

    def _count_block(self, detail: BlockHealth) -> None:
        s = self._summary
        s.total_replicas += detail.live_replicas
        if s.min_replication is None or detail.live_replicas < s.min_replication:
            s.min_replication = detail.live_replicas
        if detail.live_replicas > 0:
            s.minimally_replicated_blocks += 1
        if detail.over_replicated:
            s.over_replicated_blocks += 1
        s.missing_replicas += detail.missing_replicas

        if detail.verdict == HealthVerdict.UNDER_REPLICATED:
            s.under_replicated_blocks += 1
        elif detail.verdict == HealthVerdict.CORRUPT:
            s.corrupt_blocks += 1
        elif detail.verdict == HealthVerdict.MISSING:
            s.missing_blocks += 1
            s.missing_size += detail.block.length

    def _write_file_detail(self, health: FileHealth) -> None:
        record = health.record
        block_count = len(record.blocks)
        header = f"{record.path} {record.length} bytes, {block_count} block(s)"
        if health.open_for_write and self.show_open_files:
            header += f", {OPEN_FOR_WRITE_TOKEN}"
        state = "OK" if health.verdict == HealthVerdict.HEALTHY else health.verdict.name
        self._write(f"{header}: {state}")

        for detail in health.blocks:
            block = detail.block
            if detail.verdict == HealthVerdict.CORRUPT:
                self._write(f"{record.path}: CORRUPT block {block.block_id}")
            elif detail.verdict == HealthVerdict.MISSING:
                self._write(
                    f"{record.path}: MISSING block {block.block_id} of size {block.length} B"
                )
            elif detail.verdict == HealthVerdict.UNDER_REPLICATED:
                self._write(
                    f"{record.path}: Under replicated {block.block_id}. "
                    f"Target Replicas is {detail.target_replication} "
                    f"but found {detail.live_replicas} replica(s)."
                )

        if self.show_blocks:
            for index, detail in enumerate(health.blocks):
                self._write(self._block_line(index, detail))

    def _block_line(self, index: int, detail: BlockHealth) -> str:
        block = detail.block
        line = f"{index}. {block.block_id} len={block.length} repl={detail.live_replicas}"
        if self.show_locations:
            nodes = ", ".join(
                replica.node_id + ("(corrupt)" if replica.corrupt else "")
                for replica in sorted(block.replicas, key=lambda r: r.node_id)
                if replica.live
            )
            line += f" [{nodes}]"
        return line

    def add_failure(self, path: str, reason: str) -> None:
        """Record an internal fault for one file; the walk continues."""
        self._check_open()
        self._summary.failed_files += 1
        logger.warning(f"Check failed for {path}: {reason}")
        self._write(f"{path}: {FAILURE_STATUS} {reason}")

    def add_moved(self, path: str, destination: str) -> None:
        self._check_open()
        self._summary.moved_files += 1
        self._write(f"Moved {path} to {destination}")

    def add_deleted(self, path: str) -> None:
        self._check_open()
        self._summary.deleted_files += 1
        self._write(f"Deleted {path}")

    def finalize(self) -> ClusterSummary:
        """Freeze the counters; further additions raise RuntimeError."""
        if self._finalized is None:
            self._finalized = replace(self._summary)
        return self._finalized

    @property
    def status(self) -> FsckStatus:
        return self.summary.status

    @property
    def exit_code(self) -> int:
        return self.status.exit_code

    def summary_lines(self) -> List[str]:
        s = self.summary
        blocks = s.total_blocks
        lines = [f"Status: {s.status.value}"]
        lines.append(f" Total size:\t{s.total_size} B ({format_file_size(s.total_size)})")
        if s.open_files_size > 0 and not self.show_open_files:
            lines.append(
                f" Total open files size:\t{s.open_files_size} B"
                f" (Files currently being written: {s.open_files})"
            )
        lines.append(f" Total dirs:\t{s.total_dirs}")
        lines.append(f" Total files:\t{s.total_files}")
        if s.open_files_blocks > 0 and not self.show_open_files:
            lines.append(
                f" Total open file blocks (not validated):\t{s.open_files_blocks}"
            )
        if blocks > 0:
            avg_size = s.total_size // blocks
            lines.append(f" Total blocks (validated):\t{blocks} (avg. block size {avg_size} B)")
        else:
            lines.append(f" Total blocks (validated):\t{blocks}")

        if s.corrupt_files > 0:
            lines.append("  ********************************")
            lines.append(f"  CORRUPT FILES:\t{s.corrupt_files}")
            if s.missing_blocks > 0:
                lines.append(f"  MISSING BLOCKS:\t{s.missing_blocks}")
                lines.append(f"  MISSING SIZE:\t\t{s.missing_size} B")
            if s.corrupt_blocks > 0:
                lines.append(f"  CORRUPT BLOCKS: \t{s.corrupt_blocks}")
            lines.append("  ********************************")

        lines.append(
            f" Minimally replicated blocks:\t{s.minimally_replicated_blocks}"
            f" ({percent(s.minimally_replicated_blocks, blocks)} %)"
        )
        lines.append(
            f" Over-replicated blocks:\t{s.over_replicated_blocks}"
            f" ({percent(s.over_replicated_blocks, blocks)} %)"
        )
        lines.append(
            f" Under-replicated blocks:\t{s.under_replicated_blocks}"
            f" ({percent(s.under_replicated_blocks, blocks)} %)"
        )
        lines.append(f" Corrupt blocks:\t\t{s.corrupt_blocks}")
        lines.append(f" Missing blocks:\t\t{s.missing_blocks}")
        lines.append(
            f" Missing replicas:\t\t{s.missing_replicas}"
            f" ({percent(s.missing_replicas, s.total_replicas + s.missing_replicas)} %)"
        )
        lines.append(f" Average block replication:\t{s.average_replication:.2f}")
        min_repl = s.min_replication if s.min_replication is not None else 0
        lines.append(f" Minimum block replication:\t{min_repl}")
        if self.show_open_files:
            lines.append(f" Files open for write:\t{s.open_files}")
        if s.moved_files:
            lines.append(f" Moved files:\t{s.moved_files}")
        if s.deleted_files:
            lines.append(f" Deleted files:\t{s.deleted_files}")
        if s.failed_files:
            lines.append(f" Failed files:\t{s.failed_files}")
        return lines

    def render(self) -> str:
        """Return the full report: per-file lines, summary and status line."""
        summary = self.finalize()
        body = self.out.getvalue() if isinstance(self.out, io.StringIO) else ""
        lines = [body.rstrip("\n")] if body else []
        lines.extend(self.summary_lines())
        lines.append("")
        lines.append("")
        lines.append(status_line(summary.status, self.path))
        return "\n".join(lines) + "\n"
