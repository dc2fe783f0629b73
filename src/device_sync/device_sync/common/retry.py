from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Tuple, Type, TypeVar

from ..core.constants import DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_BASE_DELAY, DEFAULT_RETRY_MAX_DELAY

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = DEFAULT_RETRY_ATTEMPTS
    base_delay: float = DEFAULT_RETRY_BASE_DELAY
    max_delay: float = DEFAULT_RETRY_MAX_DELAY

    def delay_for(self, attempt: int) -> float:
        # attempt is 1-based: 1 -> base, 2 -> 2*base, 3 -> 4*base ...
        return min(self.max_delay, self.base_delay * (2 ** (attempt - 1)))


def call_with_retry(
    fn: Callable[[], T],
    *,
    policy: RetryPolicy | None = None,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    description: str = "call",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run `fn`, retrying on `retry_on` with capped exponential backoff.

    The last error is re-raised once the attempts are used up.
    """
    policy = policy or RetryPolicy()
    attempts = max(1, int(policy.attempts))
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except retry_on as e:
            if attempt == attempts:
                raise
            wait = policy.delay_for(attempt)
            logger.warning("%s failed (attempt %s/%s): %s; retrying in %.2fs", description, attempt, attempts, e, wait)
            sleep(wait)
    raise AssertionError("unreachable")
