from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

DEFAULT_TIMEOUT = timedelta(minutes=15)
POLL_INTERVAL = timedelta(seconds=30)


class WaitError(Exception):
    pass


class Verdict(str, Enum):
    DONE = "done"
    RETRY = "retry"
    FATAL = "fatal"


@dataclass(frozen=True)
class Outcome:
    """Result of a single probe call.

    ``RETRY`` and ``FATAL`` always carry the exception explaining them,
    ``DONE`` never does.
    """

    verdict: Verdict
    reason: Optional[Exception] = None

    def __post_init__(self) -> None:
        if (self.verdict is Verdict.DONE) != (self.reason is None):
            raise ValueError(f"{self.verdict.value} outcome with reason {self.reason!r}")

    @classmethod
    def done(cls) -> Outcome:
        return cls(Verdict.DONE)

    @classmethod
    def retry(cls, reason: Exception) -> Outcome:
        return cls(Verdict.RETRY, reason)

    @classmethod
    def fatal(cls, reason: Exception) -> Outcome:
        return cls(Verdict.FATAL, reason)


@dataclass(frozen=True)
class WaitSpec:
    timeout: timedelta = DEFAULT_TIMEOUT
    poll_interval: timedelta = POLL_INTERVAL


Probe = Callable[[], Outcome]
LogFn = Callable[[str], None]
ClockFn = Callable[[], datetime]
SleepFn = Callable[[float], None]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def deadline(timeout: timedelta, now: datetime | None = None) -> datetime:
    return (now or utcnow()) + timeout


class Awaiter:
    def __init__(
        self,
        description: str,
        spec: WaitSpec | None = None,
        probe: Probe | None = None,
        log: LogFn = print,
        clock: ClockFn = utcnow,
        sleep: SleepFn = time.sleep,
    ):
        self.description = description
        self.spec = spec or WaitSpec()
        self.probe = probe
        self.log = log
        self.clock = clock
        self.sleep = sleep

    def with_timeout(self, timeout: timedelta) -> Awaiter:
        self.spec = WaitSpec(timeout=timeout, poll_interval=self.spec.poll_interval)
        return self

    def with_probe(self, probe: Probe) -> Awaiter:
        self.probe = probe
        return self

    def wait(self) -> None:
        """Poll the probe until it is done, fails fatally or the deadline passes.

        The exception carried by the last outcome is raised as-is, so callers
        see the most specific reason rather than a generic timeout.
        """
        if self.probe is None:
            raise WaitError(f"no probe configured for {self.description}")

        until = deadline(self.spec.timeout, self.clock())
        stamp = f"{until:%I:%M%p}".lstrip("0")
        self.log(f"Waiting for {self.description} until {stamp} (UTC)...")

        while True:
            outcome = self.probe()
            if outcome.verdict is Verdict.DONE:
                self.log(f"Finished waiting for {self.description}")
                return

            self.log(f"  → {outcome.reason}")
            if outcome.verdict is Verdict.RETRY and self.clock() < until:
                self.sleep(self.spec.poll_interval.total_seconds())
                continue
            raise outcome.reason
