from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tests.fakes import FakeClock
from tools.converge.wait import DEFAULT_TIMEOUT, POLL_INTERVAL, Awaiter, Outcome, Verdict, WaitError, WaitSpec, deadline


class Transient(Exception):
    pass


def _awaiter(clock, probe, timeout: timedelta = DEFAULT_TIMEOUT, log: list[str] | None = None) -> Awaiter:
    lines = log if log is not None else []
    return Awaiter(
        "test resource",
        spec=WaitSpec(timeout=timeout),
        probe=probe,
        log=lines.append,
        clock=clock.now,
        sleep=clock.sleep,
    )


def test_deadline_adds_timeout() -> None:
    now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert deadline(timedelta(minutes=15), now) == datetime(2024, 3, 1, 12, 15, tzinfo=timezone.utc)


def test_defaults() -> None:
    awaiter = Awaiter("x")
    assert awaiter.spec.timeout == timedelta(minutes=15)
    assert awaiter.spec.poll_interval == timedelta(seconds=30)
    assert DEFAULT_TIMEOUT == timedelta(minutes=15)
    assert POLL_INTERVAL == timedelta(seconds=30)


def test_done_on_first_poll_returns_without_sleeping(clock) -> None:
    log: list[str] = []
    _awaiter(clock, Outcome.done, log=log).wait()

    assert clock.sleeps == []
    assert log == [
        "Waiting for test resource until 12:15PM (UTC)...",
        "Finished waiting for test resource",
    ]


def test_deadline_is_printed_without_leading_zero() -> None:
    clock = FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))
    log: list[str] = []
    _awaiter(clock, Outcome.done, log=log).wait()
    assert log[0] == "Waiting for test resource until 9:15AM (UTC)..."


@pytest.mark.parametrize("timeout_seconds", [0, 30, 90, 100, 15 * 60])
def test_retry_forever_fails_between_timeout_and_one_interval_later(clock, timeout_seconds: int) -> None:
    err = Transient("not yet")
    start = clock.now()
    timeout = timedelta(seconds=timeout_seconds)

    with pytest.raises(Transient) as exc_info:
        _awaiter(clock, lambda: Outcome.retry(err), timeout=timeout).wait()

    assert exc_info.value is err
    assert timeout <= clock.elapsed(start) <= timeout + POLL_INTERVAL
    assert all(s == 30.0 for s in clock.sleeps)


def test_fatal_stops_immediately(clock) -> None:
    err = Transient("forbidden")
    calls = []

    def probe() -> Outcome:
        calls.append(1)
        return Outcome.fatal(err)

    with pytest.raises(Transient):
        _awaiter(clock, probe).wait()

    assert len(calls) == 1
    assert clock.sleeps == []


def test_retries_until_done(clock) -> None:
    outcomes = [Outcome.retry(Transient("first")), Outcome.retry(Transient("second")), Outcome.done()]
    log: list[str] = []

    _awaiter(clock, lambda: outcomes.pop(0), log=log).wait()

    assert clock.sleeps == [30.0, 30.0]
    assert "  → first" in log
    assert "  → second" in log
    assert log[-1] == "Finished waiting for test resource"


def test_deadline_is_computed_when_waiting_starts(clock) -> None:
    awaiter = _awaiter(clock, lambda: Outcome.retry(Transient("not yet")), timeout=timedelta(seconds=60))
    clock.current += timedelta(hours=1)

    with pytest.raises(Transient):
        awaiter.wait()

    assert clock.sleeps == [30.0, 30.0]


def test_wait_without_probe_is_an_error(clock) -> None:
    with pytest.raises(WaitError):
        _awaiter(clock, None).wait()


def test_builders_chain() -> None:
    awaiter = Awaiter("x").with_timeout(timedelta(minutes=1)).with_probe(Outcome.done)
    assert awaiter.spec.timeout == timedelta(minutes=1)
    assert awaiter.spec.poll_interval == POLL_INTERVAL
    assert awaiter.probe is Outcome.done


def test_outcome_variants() -> None:
    err = Transient("x")
    assert Outcome.done().verdict is Verdict.DONE
    assert Outcome.retry(err).reason is err
    assert Outcome.fatal(err).verdict is Verdict.FATAL

    with pytest.raises(ValueError):
        Outcome(Verdict.DONE, err)
    with pytest.raises(ValueError):
        Outcome(Verdict.RETRY)
