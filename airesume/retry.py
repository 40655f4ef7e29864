"""Retrying API calls with exponential backoff."""
from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Type

from airesume.log import get_logger

log = get_logger(__name__)

# Called with (failures before this one, exception); False stops retrying.
RetryPredicate = Callable[[int, BaseException], bool]


@dataclass(frozen=True)
class Backoff:
    base_delay: float = 1.0
    max_delay: float = 30.0
    factor: float = 2.0
    jitter: bool = True

    def delay(self, failures: int) -> float:
        """Seconds to wait after the ``failures``-th failure."""
        wait = min(self.base_delay * self.factor ** (failures - 1), self.max_delay)
        if self.jitter:
            wait *= 0.5 + random.random()
        return wait


def call_with_retry(
    fn: Callable[[], Any],
    *,
    max_attempts: int = 3,
    backoff: Backoff = Backoff(),
    retryable: Tuple[Type[BaseException], ...] = (Exception,),
    should_retry: Optional[RetryPredicate] = None,
    label: str = "",
) -> Any:
    """Call ``fn`` until it succeeds, ``should_retry`` says stop, or
    ``max_attempts`` calls have failed. The last exception is re-raised.

    Exceptions outside ``retryable`` propagate on the first failure.
    """
    label = label or getattr(fn, "__qualname__", "call")
    failures = 0
    while True:
        try:
            return fn()
        except retryable as exc:
            failures += 1
            if should_retry is not None and not should_retry(failures - 1, exc):
                log.debug("%s not retried after failure %d: %s", label, failures, exc)
                raise
            if failures >= max_attempts:
                log.error("%s failed after %d attempts: %s", label, failures, exc)
                raise
            wait = backoff.delay(failures)
            log.warning(
                "%s attempt %d/%d failed (%s), retrying in %.1fs",
                label, failures, max_attempts, exc, wait,
            )
            time.sleep(wait)
