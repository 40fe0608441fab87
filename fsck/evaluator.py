"""Block health evaluation for a single file."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple

from common.logging_config import get_logger
from common.types import BlockRecord, FileRecord
from fsck.exceptions import MalformedBlockError

logger = get_logger(__name__)


class HealthVerdict(IntEnum):
    """
    Health classification of a block or file.

    Values are ordered by severity so the worst verdict is ``max()``.
    """
    HEALTHY = 0
    UNDER_REPLICATED = 1
    CORRUPT = 2
    MISSING = 3


@dataclass(frozen=True)
class BlockHealth:
    """
    Evaluation detail for one block.
    """
    block: BlockRecord
    verdict: HealthVerdict
    live_replicas: int
    corrupt_replicas: int
    target_replication: int

    @property
    def over_replicated(self) -> bool:
        return self.live_replicas > self.target_replication

    @property
    def missing_replicas(self) -> int:
        return max(self.target_replication - self.live_replicas, 0)


@dataclass
class FileHealth:
    """
    Evaluation result for one file.

    ``skipped`` is set for files open for write that were not requested
    with the open-for-write option; their blocks are not evaluated.
    ``excluded_blocks`` holds blocks left out of the verdict (the last
    block of a file still being written).
    """
    record: FileRecord
    verdict: HealthVerdict = HealthVerdict.HEALTHY
    blocks: List[BlockHealth] = field(default_factory=list)
    excluded_blocks: Tuple[BlockRecord, ...] = ()
    open_for_write: bool = False
    skipped: bool = False

    @property
    def path(self) -> str:
        return self.record.path

    @property
    def is_corrupt(self) -> bool:
        """True if any evaluated block is CORRUPT or MISSING."""
        return self.verdict >= HealthVerdict.CORRUPT

    def blocks_with(self, verdict: HealthVerdict) -> List[BlockHealth]:
        return [b for b in self.blocks if b.verdict == verdict]


def _is_live(block: BlockRecord, replica) -> bool:
    return replica.live and not replica.corrupt and not block.corrupt


def evaluate_block(path: str, block: BlockRecord, target_replication: int) -> BlockHealth:
    """
    Classify a single block.

    Args:
        path: Owning file path (for error reporting)
        block: Block to classify
        target_replication: Expected number of live replicas

    Returns:
        BlockHealth with the block's verdict and replica counts

    Raises:
        MalformedBlockError: If the block's declared length is negative
    """
    if block.length < 0:
        raise MalformedBlockError(path, block.block_id, block.length)

    live = sum(1 for replica in block.replicas if _is_live(block, replica))
    if block.corrupt:
        corrupt = len(block.replicas)
    else:
        corrupt = sum(1 for replica in block.replicas if replica.corrupt)

    if live == 0:
        verdict = HealthVerdict.CORRUPT if corrupt > 0 else HealthVerdict.MISSING
    elif live < target_replication:
        verdict = HealthVerdict.UNDER_REPLICATED
    else:
        verdict = HealthVerdict.HEALTHY

    return BlockHealth(
        block=block,
        verdict=verdict,
        live_replicas=live,
        corrupt_replicas=corrupt,
        target_replication=target_replication,
    )


def evaluate(record: FileRecord, open_for_write_visible: bool = False) -> FileHealth:
    """
    Classify every block of a file and derive the file verdict.

    A file open for write is skipped entirely unless ``open_for_write_visible``
    is set; when it is set the file is tagged open-for-write and its last
    (possibly incomplete) block is left out of the verdict.

    Args:
        record: File to evaluate
        open_for_write_visible: Whether open files should be inspected and reported

    Returns:
        FileHealth for the file

    Raises:
        MalformedBlockError: If any evaluated block is malformed
    """
    if record.open_for_write and not open_for_write_visible:
        logger.debug(f"Skipping open file {record.path}")
        return FileHealth(record=record, skipped=True)

    blocks = record.blocks
    excluded: Tuple[BlockRecord, ...] = ()
    if record.open_for_write and blocks:
        blocks, excluded = blocks[:-1], blocks[-1:]

    target = max(record.replication, 1)
    details = [evaluate_block(record.path, block, target) for block in blocks]
    verdict = max((d.verdict for d in details), default=HealthVerdict.HEALTHY)

    if verdict != HealthVerdict.HEALTHY:
        logger.debug(f"File {record.path} evaluated as {verdict.name}")

    return FileHealth(
        record=record,
        verdict=verdict,
        blocks=details,
        excluded_blocks=excluded,
        open_for_write=record.open_for_write,
    )
