"""Namespace consistency checker for the RedCloud block file system."""

from fsck.checker import FsckOptions, FsckResult, NamespaceChecker
from fsck.evaluator import BlockHealth, FileHealth, HealthVerdict, evaluate
from fsck.lister import CorruptFileLister, build_summary_for_corrupt_files, summarize
from fsck.metadata import MetadataService
from fsck.quarantine import QuarantineMover, compute_destination
from fsck.report import (
    CORRUPT_STATUS,
    FAILURE_STATUS,
    HEALTHY_STATUS,
    ClusterSummary,
    FsckStatus,
    SummaryReportBuilder,
)
from fsck.retry import wait_until
from fsck.walker import NamespaceWalker

__all__ = [
    "FsckOptions",
    "FsckResult",
    "NamespaceChecker",
    "BlockHealth",
    "FileHealth",
    "HealthVerdict",
    "evaluate",
    "CorruptFileLister",
    "build_summary_for_corrupt_files",
    "summarize",
    "MetadataService",
    "QuarantineMover",
    "compute_destination",
    "CORRUPT_STATUS",
    "FAILURE_STATUS",
    "HEALTHY_STATUS",
    "ClusterSummary",
    "FsckStatus",
    "SummaryReportBuilder",
    "wait_until",
    "NamespaceWalker",
]
