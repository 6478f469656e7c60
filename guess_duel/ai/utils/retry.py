"""
Bounded retry shared by the name generator and the judgment service.

A RetryPolicy says how many attempts to make, which failures are worth another
attempt, and how long to wait after each kind of failure. Attempts run
sequentially; the last failure is re-raised unchanged once attempts run out.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int
    retryable: Callable[[BaseException], bool]
    # (exception types, seconds to wait) checked in order; unmatched failures wait 0
    delays: Tuple[Tuple[Tuple[Type[BaseException], ...], float], ...] = ()
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    name: str = "operation"

    def delay_for(self, exc: BaseException) -> float:
        for exc_types, seconds in self.delays:
            if isinstance(exc, exc_types):
                return seconds
        return 0.0


async def run_with_retry(policy: RetryPolicy, fn: Callable[[], Awaitable[T]]) -> T:
    """Call ``fn`` until it succeeds, fails with a non-retryable error, or attempts run out."""

    def _wait(retry_state: RetryCallState) -> float:
        return policy.delay_for(retry_state.outcome.exception())

    async def _sleep(seconds: float) -> None:
        if seconds > 0:
            await policy.sleep(seconds)

    def _log_retry(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception()
        logger.warning(
            f"{policy.name} attempt {retry_state.attempt_number}/{policy.max_attempts} failed: "
            f"{type(exc).__name__}: {exc}"
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        retry=retry_if_exception(policy.retryable),
        wait=_wait,
        sleep=_sleep,
        before_sleep=_log_retry,
        reraise=True,
    )
    return await retrying(fn)
