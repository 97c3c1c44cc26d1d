"""Job poller — bounded status loop with an injectable retry policy."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import structlog

from graphrisk_scan.client import ScanClient
from graphrisk_scan.errors import JobFailedError, ScanTimeoutError, StatusCheckError
from graphrisk_scan.models import JobStatus

log = structlog.get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]
AttemptHook = Callable[[int, JobStatus], None]


@dataclass(frozen=True)
class RetryPolicy:
    """How long to wait between status checks and how many to make.

    The defaults give a 10-minute soft budget (60 checks, 10 s apart).
    ``backoff`` > 1 stretches each wait geometrically, capped at
    ``max_interval``; ``jitter`` adds up to that many random seconds.
    """

    interval: float = 10.0
    max_attempts: int = 60
    jitter: float = 0.0
    backoff: float = 1.0
    max_interval: float | None = None
    rng: random.Random = field(default_factory=random.Random, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.interval < 0:
            raise ValueError(f"interval must be >= 0, got {self.interval}")
        if self.jitter < 0:
            raise ValueError(f"jitter must be >= 0, got {self.jitter}")
        if self.backoff < 1:
            raise ValueError(f"backoff must be >= 1, got {self.backoff}")

    def _base_delay(self, attempt: int) -> float:
        wait = self.interval * (self.backoff ** (attempt - 1))
        if self.max_interval is not None:
            wait = min(wait, self.max_interval)
        return wait

    def delay(self, attempt: int) -> float:
        """Seconds to wait before the 1-based *attempt*."""
        wait = self._base_delay(attempt)
        if self.jitter:
            wait += self.rng.uniform(0, self.jitter)
        return wait

    @property
    def budget(self) -> float:
        """Nominal total wait, ignoring jitter and request time."""
        return sum(self._base_delay(n) for n in range(1, self.max_attempts + 1))


@dataclass
class PollOutcome:
    status: JobStatus
    attempts: int
    failures: list[StatusCheckError] = field(default_factory=list)
    raw_status: str | None = None


class JobPoller:
    """Drive ``check_status`` until the job is terminal or the budget runs out.

    A failed check never changes the status and never ends the loop on its
    own; only a successful non-PENDING read or budget exhaustion does.
    """

    def __init__(
        self,
        client: ScanClient,
        policy: RetryPolicy | None = None,
        *,
        sleep: SleepFn = asyncio.sleep,
        on_attempt: AttemptHook | None = None,
    ) -> None:
        self._client = client
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._on_attempt = on_attempt

    async def poll(self, scan_id: str) -> PollOutcome:
        outcome = PollOutcome(status=JobStatus.PENDING, attempts=0)

        while outcome.status is JobStatus.PENDING and outcome.attempts < self.policy.max_attempts:
            await self._sleep(self.policy.delay(outcome.attempts + 1))
            outcome.attempts += 1

            try:
                reading = await self._client.check_status(scan_id)
            except StatusCheckError as exc:
                outcome.failures.append(exc)
                log.error(
                    "poll.check_failed",
                    scan_id=scan_id,
                    attempt=outcome.attempts,
                    max_attempts=self.policy.max_attempts,
                    error=str(exc),
                )
            else:
                outcome.status, outcome.raw_status = reading.status, reading.raw
                log.debug(
                    "poll.status",
                    scan_id=scan_id,
                    attempt=outcome.attempts,
                    status=outcome.status.value,
                )

            if self._on_attempt is not None:
                self._on_attempt(outcome.attempts, outcome.status)

        return outcome

    async def wait(self, scan_id: str) -> PollOutcome:
        """Poll until COMPLETED; raise on timeout or any other terminal status."""
        outcome = await self.poll(scan_id)
        if outcome.status is JobStatus.COMPLETED:
            log.info("poll.completed", scan_id=scan_id, attempts=outcome.attempts)
            return outcome
        if outcome.status is JobStatus.PENDING:
            raise ScanTimeoutError(outcome.status, outcome.attempts)
        raise JobFailedError(outcome.status, outcome.raw_status)
