"""In-process query cache: stale times, shared in-flight fetches, retries.

Keys are tuples whose first element names the query, e.g.
``("job-applications", 12, {"status_filter": "pending"})``. Dicts and lists
inside a key are frozen so they can be hashed and compared.
"""
from __future__ import annotations

import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Iterable, Union

from airesume.config import DEFAULT_CACHE_TIME, QueryPolicy
from airesume.errors import ApiError, status_of
from airesume.log import get_logger
from airesume.retry import Backoff, RetryPredicate, call_with_retry

log = get_logger(__name__)

DEFAULT_RETRIES = 3
# Upper bound on attempts when a predicate decides when to stop.
_PREDICATE_ATTEMPT_CAP = 10

RetrySpec = Union[bool, int, RetryPredicate]


def _freeze(part: Any) -> Hashable:
    if isinstance(part, dict):
        return tuple(sorted((k, _freeze(v)) for k, v in part.items() if v is not None))
    if isinstance(part, (list, tuple, set)):
        return tuple(_freeze(p) for p in part)
    return part


def make_key(key: Iterable[Any]) -> tuple:
    return tuple(_freeze(part) for part in key)


def no_retry_on(*statuses: int, attempts: int = 2) -> RetryPredicate:
    """Never retry ``statuses``; retry anything else up to ``attempts`` more times."""

    def predicate(failure_count: int, exc: BaseException) -> bool:
        if status_of(exc) in statuses:
            return False
        return failure_count < attempts

    return predicate


@dataclass
class _Entry:
    value: Any
    fetched_at: float
    last_used: float
    cache_time: float


class QueryCache:
    def __init__(
        self,
        *,
        retry_delay: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.retry_delay = retry_delay
        self._clock = clock
        self._entries: dict[tuple, _Entry] = {}
        self._inflight: dict[tuple, Future] = {}
        # In-flight keys invalidated after their fetch started; results are not stored.
        self._superseded: set[tuple] = set()
        self._lock = threading.Lock()

    def __contains__(self, key: Iterable[Any]) -> bool:
        with self._lock:
            return make_key(key) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _evict(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if now - e.last_used > e.cache_time]
        for k in expired:
            del self._entries[k]

    def _call(self, fn: Callable[[], Any], retry: RetrySpec) -> Any:
        if retry is False or retry is None:
            return fn()
        if callable(retry):
            max_attempts = _PREDICATE_ATTEMPT_CAP
            predicate = retry
        else:
            max_attempts = (DEFAULT_RETRIES if retry is True else int(retry)) + 1
            predicate = None
        if max_attempts <= 1:
            return fn()
        return call_with_retry(
            fn,
            max_attempts=max_attempts,
            backoff=Backoff(base_delay=self.retry_delay),
            retryable=(ApiError,),
            should_retry=predicate,
        )

    def fetch(
        self,
        key: Iterable[Any],
        fn: Callable[[], Any],
        *,
        stale_time: float = 0.0,
        cache_time: float = DEFAULT_CACHE_TIME,
        retry: RetrySpec = DEFAULT_RETRIES,
    ) -> Any:
        """Return cached data for ``key`` while fresh, otherwise call ``fn``.

        Callers asking for the same key while a fetch is running wait for
        that fetch instead of starting another one.
        """
        frozen = make_key(key)
        now = self._clock()
        with self._lock:
            self._evict(now)
            entry = self._entries.get(frozen)
            if entry is not None and now - entry.fetched_at < stale_time:
                entry.last_used = now
                return entry.value
            pending = self._inflight.get(frozen)
            if pending is None:
                pending = Future()
                self._inflight[frozen] = pending
                owner = True
            else:
                owner = False

        if not owner:
            log.debug("Joining in-flight fetch for %s", frozen[:1])
            return pending.result()

        try:
            value = self._call(fn, retry)
        except BaseException as exc:
            with self._lock:
                self._inflight.pop(frozen, None)
                self._superseded.discard(frozen)
            pending.set_exception(exc)
            raise

        done = self._clock()
        with self._lock:
            if frozen in self._superseded:
                self._superseded.discard(frozen)
                log.debug("Discarding result for %s invalidated mid-fetch", frozen[:1])
            else:
                self._entries[frozen] = _Entry(value, done, done, cache_time)
            self._inflight.pop(frozen, None)
        pending.set_result(value)
        return value

    def fetch_with_policy(
        self,
        key: Iterable[Any],
        fn: Callable[[], Any],
        policy: QueryPolicy,
        retry: RetrySpec = DEFAULT_RETRIES,
    ) -> Any:
        return self.fetch(
            key, fn, stale_time=policy.stale_time, cache_time=policy.cache_time, retry=retry
        )

    def get_data(self, key: Iterable[Any]) -> Any:
        with self._lock:
            entry = self._entries.get(make_key(key))
            return entry.value if entry is not None else None

    def invalidate(self, prefix: Iterable[Any]) -> int:
        """Drop every entry whose key starts with ``prefix``.

        A fetch already running for a matching key still answers its callers
        but its result is not cached.
        """
        frozen = make_key(prefix)
        with self._lock:
            doomed = [k for k in self._entries if k[: len(frozen)] == frozen]
            for k in doomed:
                del self._entries[k]
            self._superseded.update(k for k in self._inflight if k[: len(frozen)] == frozen)
        if doomed:
            log.debug("Invalidated %d cached %s queries", len(doomed), frozen[:1])
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._superseded.update(self._inflight)
