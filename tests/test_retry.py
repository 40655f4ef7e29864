import pytest

from airesume import retry as retry_mod
from airesume.retry import Backoff, call_with_retry


class Flaky:
    def __init__(self, failures, exc=ValueError):
        self.failures = failures
        self.exc = exc
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc(f"boom {self.calls}")
        return "done"


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    waits = []
    monkeypatch.setattr(retry_mod.time, "sleep", waits.append)
    return waits


def test_backoff_grows_and_caps():
    backoff = Backoff(base_delay=1.0, max_delay=5.0, jitter=False)
    assert [backoff.delay(n) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 5.0]


def test_backoff_jitter_stays_in_band():
    backoff = Backoff(base_delay=2.0)
    for _ in range(20):
        assert 1.0 <= backoff.delay(1) <= 3.0


def test_recovers_before_limit(no_sleep):
    fn = Flaky(2)
    assert call_with_retry(fn, max_attempts=3, backoff=Backoff(jitter=False)) == "done"
    assert fn.calls == 3
    assert no_sleep == [1.0, 2.0]


def test_gives_up_after_max_attempts():
    fn = Flaky(5)
    with pytest.raises(ValueError, match="boom 3"):
        call_with_retry(fn, max_attempts=3)
    assert fn.calls == 3


def test_non_retryable_propagates_immediately():
    fn = Flaky(1, exc=KeyError)
    with pytest.raises(KeyError):
        call_with_retry(fn, max_attempts=3, retryable=(ValueError,))
    assert fn.calls == 1


def test_predicate_sees_prior_failure_count():
    seen = []

    def should_retry(count, exc):
        seen.append(count)
        return count < 1

    fn = Flaky(5)
    with pytest.raises(ValueError):
        call_with_retry(fn, max_attempts=10, should_retry=should_retry)
    assert seen == [0, 1]
    assert fn.calls == 2
