import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from src.modules.scraper.exceptions import RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleeper = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try an operation and how long to wait in between.

    ``delay`` is used after a raised error, ``retry_delay`` after a result the
    caller rejected (falls back to ``delay``). Waits grow by ``backoff`` per
    attempt: ``delay * backoff ** (attempt - 1)``.
    """

    attempts: int
    delay: float
    retry_delay: float | None = None
    backoff: float = 1.0
    retry_on: tuple[type[BaseException], ...] = (Exception,)

    def wait_after_error(self, attempt: int) -> float:
        return self.delay * self.backoff ** (attempt - 1)

    def wait_after_rejection(self, attempt: int) -> float:
        base = self.delay if self.retry_delay is None else self.retry_delay
        return base * self.backoff ** (attempt - 1)


async def retry(
    operation: Callable[[int], Awaitable[T]],
    policy: RetryPolicy,
    *,
    label: str,
    accept: Callable[[T], bool] | None = None,
    sleep: Sleeper = asyncio.sleep,
) -> T:
    """Run ``operation(attempt)`` until it succeeds or the policy runs out.

    A result rejected by ``accept`` is retried too; on the last attempt it is
    returned as-is. An error on the last attempt raises
    :class:`RetryExhaustedError` chained to that error.
    """
    for attempt in range(1, policy.attempts + 1):
        try:
            result = await operation(attempt)
        except policy.retry_on as exc:
            if attempt >= policy.attempts:
                raise RetryExhaustedError(label, policy.attempts) from exc
            wait = policy.wait_after_error(attempt)
            logger.warning(
                "%s: attempt %d/%d failed: %s, retrying in %.1fs",
                label, attempt, policy.attempts, exc, wait,
            )
            await sleep(wait)
            continue

        if accept is None or accept(result) or attempt >= policy.attempts:
            return result

        wait = policy.wait_after_rejection(attempt)
        logger.info(
            "%s: attempt %d/%d returned nothing usable, retrying in %.1fs",
            label, attempt, policy.attempts, wait,
        )
        await sleep(wait)

    raise RetryExhaustedError(label, policy.attempts)
