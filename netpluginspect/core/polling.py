"""Bounded poll-until-ready helper."""

from __future__ import annotations

import time
from typing import Callable

from netpluginspect.core.errors import ReadinessTimeoutError
from netpluginspect.core.logging import get_logger

logger = get_logger(__name__)


def poll_until(
    predicate: Callable[[], bool],
    *,
    what: str,
    timeout: float,
    interval: float,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """Call *predicate* until it returns True or *timeout* seconds elapse.

    The predicate is always evaluated at least once, and once more at the
    deadline. Returns the number of attempts made; raises
    ``ReadinessTimeoutError`` when the deadline passes first.
    """
    deadline = clock() + timeout
    attempts = 0
    while True:
        attempts += 1
        if predicate():
            logger.debug("Condition reached", what=what, attempts=attempts)
            return attempts
        remaining = deadline - clock()
        if remaining <= 0:
            raise ReadinessTimeoutError(what, timeout)
        sleep(min(interval, remaining))
