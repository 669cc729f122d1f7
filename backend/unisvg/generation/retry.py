"""Bounded retry with exponential backoff and a per-attempt timeout."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, TypeVar

from unisvg.generation.errors import ClassifiedError, TierTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3  # total attempts per tier, at least one always runs
    base_delay_ms: float = 1000
    max_delay_ms: float = 10000
    timeout_ms: float = 30000

    def delay_for(self, attempt: int) -> float:
        """Backoff in ms after a failed attempt (1-based)."""
        return min(self.base_delay_ms * 2 ** (attempt - 1), self.max_delay_ms)

    @property
    def max_attempts(self) -> int:
        return max(1, self.max_retries)


@dataclass(frozen=True)
class AttemptResult(Generic[T]):
    """Outcome of one tier: a value, or the last classified failure."""

    value: T | None = None
    failure: ClassifiedError | None = None
    attempts: int = 0
    failures: tuple[ClassifiedError, ...] = ()
    delays_ms: tuple[float, ...] = field(default=())

    @property
    def ok(self) -> bool:
        return self.failure is None

    def warnings(self) -> list[str]:
        return [f"{f.tier} attempt {f.attempt} failed: {f.message}" for f in self.failures]


def _consume_result(task: asyncio.Future) -> None:
    if not task.cancelled():
        task.exception()


async def _run_with_timeout(attempt_fn: Callable[[], Awaitable[T]], timeout_ms: float) -> T:
    """Await attempt_fn() for at most timeout_ms.

    On timeout the in-flight call is cancelled without waiting for it to
    acknowledge; its side effects may still complete.
    """
    task = asyncio.ensure_future(attempt_fn())
    done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
    if task in done:
        return task.result()
    task.add_done_callback(_consume_result)
    task.cancel()
    raise TierTimeout(f"Timeout after {timeout_ms:g}ms")


async def execute_with_retry(
    attempt_fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    tier: str = "attempt",
    sleep: Sleep | None = None,
    on_failure: Callable[[ClassifiedError], Any] | None = None,
) -> AttemptResult[T]:
    """Run attempt_fn until it succeeds, a non-recoverable error shows up,
    or attempts run out. Never raises for attempt failures.
    """
    sleep = sleep or asyncio.sleep
    failures: list[ClassifiedError] = []
    delays: list[float] = []

    for attempt in range(1, policy.max_attempts + 1):
        try:
            value = await _run_with_timeout(attempt_fn, policy.timeout_ms)
        except Exception as exc:
            failure = ClassifiedError.from_exception(exc, tier, attempt)
            failures.append(failure)
            if on_failure is not None:
                on_failure(failure)
            logger.warning("  %s attempt %d FAILED (%s): %s", tier, attempt, failure.error_class.value, failure.message)

            if not failure.recoverable or attempt == policy.max_attempts:
                break
            delay = policy.delay_for(attempt)
            delays.append(delay)
            logger.info("Retrying %s in %.0fms", tier, delay)
            await sleep(delay / 1000)
        else:
            return AttemptResult(
                value=value,
                attempts=attempt,
                failures=tuple(failures),
                delays_ms=tuple(delays),
            )

    return AttemptResult(
        failure=failures[-1],
        attempts=len(failures),
        failures=tuple(failures),
        delays_ms=tuple(delays),
    )
