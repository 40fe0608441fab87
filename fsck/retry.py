"""Polling helper for waiting on eventually consistent namespace state."""

import time
from typing import Callable, Optional, TypeVar

from common.logging_config import get_logger
from fsck.exceptions import ConvergenceTimeoutError

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_POLL_INTERVAL = 0.1


def wait_until(
    action: Callable[[], T],
    predicate: Callable[[T], bool],
    interval: float = DEFAULT_POLL_INTERVAL,
    backoff: float = 1.0,
    max_interval: Optional[float] = None,
    max_attempts: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Repeat an idempotent read until its result satisfies ``predicate``.

    Replica and corruption state reported by the namespace service lags the
    events that change it, so callers that need a settled answer (e.g.,
    "fsck now reports CORRUPT") poll with this helper instead of the checker
    sleeping internally.

    Args:
        action: Side-effect-free callable to repeat (e.g., a checker run)
        predicate: Returns True once the result is acceptable
        interval: Initial delay between attempts in seconds
        backoff: Multiplier applied to the delay after each attempt (1.0 = fixed)
        max_interval: Upper bound for the delay (None = unbounded)
        max_attempts: Maximum number of calls to ``action`` (None = poll forever)
        sleep: Sleep function (injectable for tests)

    Returns:
        The first result accepted by ``predicate``

    Raises:
        ValueError: If interval, backoff or max_attempts are out of range
        ConvergenceTimeoutError: If ``max_attempts`` calls never satisfied ``predicate``
    """
    if interval < 0 or backoff < 1.0:
        raise ValueError("interval must be >= 0 and backoff >= 1.0")
    if max_attempts is not None and max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    delay = interval
    attempt = 0
    while True:
        attempt += 1
        result = action()
        if predicate(result):
            if attempt > 1:
                logger.debug(f"Condition met after {attempt} attempts")
            return result

        if max_attempts is not None and attempt >= max_attempts:
            raise ConvergenceTimeoutError(
                f"Condition not met after {attempt} attempts"
            )

        logger.debug(f"Condition not met (attempt {attempt}), retrying in {delay:.3f}s")
        sleep(delay)
        delay = delay * backoff
        if max_interval is not None:
            delay = min(delay, max_interval)
