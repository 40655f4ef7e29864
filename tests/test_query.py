from __future__ import annotations

import threading
import time

import pytest

from airesume.errors import ApiError, ForbiddenError, NotFoundError
from airesume.query import QueryCache, make_key, no_retry_on


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class Counter:
    def __init__(self, *outcomes) -> None:
        self.calls = 0
        self.outcomes = list(outcomes)

    def __call__(self):
        self.calls += 1
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> QueryCache:
    return QueryCache(retry_delay=0, clock=clock)


def test_fresh_data_is_served_from_cache(cache, clock):
    fn = Counter("jobs")
    assert cache.fetch(("job-search", {"q": "python"}), fn, stale_time=120) == "jobs"
    clock.now += 60
    assert cache.fetch(("job-search", {"q": "python"}), fn, stale_time=120) == "jobs"
    assert fn.calls == 1


def test_stale_data_is_refetched(cache, clock):
    fn = Counter("old", "new")
    cache.fetch(("job-search",), fn, stale_time=120)
    clock.now += 121
    assert cache.fetch(("job-search",), fn, stale_time=120) == "new"
    assert fn.calls == 2


def test_zero_stale_time_always_refetches(cache):
    fn = Counter("x")
    cache.fetch(("resumes",), fn)
    cache.fetch(("resumes",), fn)
    assert fn.calls == 2


def test_unused_entries_are_evicted(cache, clock):
    cache.fetch(("resumes",), Counter("r"), cache_time=10)
    clock.now += 11
    cache.fetch(("applications",), Counter("a"))
    assert ("resumes",) not in cache
    assert ("applications",) in cache


def test_key_dicts_ignore_order_and_none():
    assert make_key(("s", {"a": 1, "b": None, "c": 2})) == make_key(("s", {"c": 2, "a": 1}))


def test_invalidate_by_prefix(cache):
    cache.fetch(("job-applications", 1, {"status_filter": None}), Counter(1))
    cache.fetch(("job-applications", 2, {}), Counter(2))
    cache.fetch(("dashboard-stats",), Counter(3))

    assert cache.invalidate(("job-applications", 1)) == 1
    assert ("job-applications", 2, {}) in cache
    assert cache.invalidate(("job-applications",)) == 1
    assert len(cache) == 1
    assert cache.get_data(("dashboard-stats",)) == 3


def test_clear(cache):
    cache.fetch(("a",), Counter(1))
    cache.clear()
    assert len(cache) == 0


def test_concurrent_fetches_share_one_call(cache):
    started, release = threading.Event(), threading.Event()
    calls = []

    def slow():
        calls.append(1)
        started.set()
        release.wait(5)
        return "done"

    results = []
    workers = [
        threading.Thread(target=lambda: results.append(cache.fetch(("k",), slow, stale_time=60)))
        for _ in range(3)
    ]
    workers[0].start()
    started.wait(5)
    for w in workers[1:]:
        w.start()
    time.sleep(0.05)
    release.set()
    for w in workers:
        w.join(5)

    assert results == ["done", "done", "done"]
    assert len(calls) == 1


def test_invalidation_during_fetch_is_not_overwritten(cache):
    started, release = threading.Event(), threading.Event()

    def slow():
        started.set()
        release.wait(5)
        return "before mutation"

    results = []
    worker = threading.Thread(
        target=lambda: results.append(cache.fetch(("applications",), slow, stale_time=60))
    )
    worker.start()
    started.wait(5)
    cache.invalidate(("applications",))
    release.set()
    worker.join(5)

    assert results == ["before mutation"]
    assert ("applications",) not in cache
    assert cache.fetch(("applications",), Counter("after mutation"), stale_time=60) == "after mutation"
    assert ("applications",) in cache


def test_unrelated_invalidation_keeps_in_flight_result(cache):
    started, release = threading.Event(), threading.Event()

    def slow():
        started.set()
        release.wait(5)
        return "resumes"

    worker = threading.Thread(target=lambda: cache.fetch(("resumes",), slow, stale_time=60))
    worker.start()
    started.wait(5)
    cache.invalidate(("applications",))
    release.set()
    worker.join(5)

    assert cache.get_data(("resumes",)) == "resumes"


def test_default_policy_retries_three_times(cache):
    fn = Counter(ApiError("down", status_code=500))
    with pytest.raises(ApiError):
        cache.fetch(("x",), fn)
    assert fn.calls == 4


def test_retry_recovers(cache):
    fn = Counter(ApiError("down", status_code=502), "ok")
    assert cache.fetch(("x",), fn) == "ok"
    assert fn.calls == 2


def test_retry_disabled(cache):
    fn = Counter(ApiError("down", status_code=500))
    with pytest.raises(ApiError):
        cache.fetch(("profile",), fn, retry=False)
    assert fn.calls == 1


def test_forbidden_is_not_retried(cache):
    fn = Counter(ForbiddenError("no", status_code=403))
    with pytest.raises(ForbiddenError):
        cache.fetch(("matching-stats",), fn, retry=no_retry_on(403))
    assert fn.calls == 1


def test_other_errors_retried_twice_more(cache):
    fn = Counter(ApiError("down", status_code=500))
    with pytest.raises(ApiError):
        cache.fetch(("matching-stats",), fn, retry=no_retry_on(403))
    assert fn.calls == 3


def test_not_found_details_are_not_retried(cache):
    fn = Counter(NotFoundError("gone", status_code=404))
    with pytest.raises(NotFoundError):
        cache.fetch(("job-details", 3), fn, retry=no_retry_on(404))
    assert fn.calls == 1


def test_failures_are_not_cached(cache):
    fn = Counter(ApiError("down", status_code=500), "ok")
    with pytest.raises(ApiError):
        cache.fetch(("x",), fn, retry=False, stale_time=60)
    assert ("x",) not in cache
    assert cache.fetch(("x",), fn, retry=False, stale_time=60) == "ok"
