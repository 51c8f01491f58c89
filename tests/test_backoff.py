import pytest

from ytx.backoff import backoff, backoff_delay, retry
from ytx.errors import ConfigurationError, TransportError


class Flaky:
    """Fails `failures` times, then returns "ok"."""

    def __init__(self, failures, error=TransportError):
        self.failures = failures
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error(f"failure {self.calls}")
        return "ok"


def test_backoff_delays():
    assert backoff_delay(1) == 0.0
    assert backoff_delay(2) == 0.5
    assert backoff_delay(3) == 1.0
    assert backoff_delay(4) == 2.0


@pytest.mark.parametrize("failures", [0, 1, 2])
def test_succeeds_within_budget(failures):
    delays = []
    op = Flaky(failures)
    assert retry(op, max_attempts=3, sleep=delays.append) == "ok"
    assert op.calls == failures + 1
    assert delays == [0.5, 1.0][:failures]


def test_last_error_wins():
    delays = []
    op = Flaky(5)
    with pytest.raises(TransportError, match="failure 3"):
        retry(op, max_attempts=3, sleep=delays.append)
    assert op.calls == 3
    # No wait after the final attempt
    assert delays == [0.5, 1.0]
    assert sum(delays) * 1000 == 500 * (2 ** 0 + 2 ** 1)


def test_cumulative_wait_for_larger_budget():
    delays = []
    with pytest.raises(TransportError):
        retry(Flaky(10), max_attempts=5, sleep=delays.append)
    assert delays == [0.5, 1.0, 2.0, 4.0]


def test_non_retryable_error_raised_immediately():
    delays = []
    op = Flaky(5, error=ConfigurationError)
    with pytest.raises(ConfigurationError):
        retry(op, max_attempts=3, sleep=delays.append)
    assert op.calls == 1
    assert delays == []


def test_unlisted_exception_not_retried():
    delays = []

    def op():
        raise KeyError("boom")

    with pytest.raises(KeyError):
        retry(op, on_exceptions=TransportError, sleep=delays.append)
    assert delays == []


def test_single_attempt():
    op = Flaky(1)
    with pytest.raises(TransportError):
        retry(op, max_attempts=1, sleep=lambda _: None)
    assert op.calls == 1


def test_invalid_attempt_budget():
    with pytest.raises(ValueError):
        retry(lambda: "ok", max_attempts=0)


def test_decorator_form():
    delays = []
    calls = []

    @backoff(on_exceptions=TransportError, tries=3, sleep=delays.append)
    def fetch(value):
        calls.append(value)
        if len(calls) < 2:
            raise TransportError("transient")
        return value * 2

    assert fetch(21) == 42
    assert calls == [21, 21]
    assert delays == [0.5]
    assert fetch.__name__ == "fetch"
