"""Exponential-backoff retry over gateway calls.

Each attempt is classified into a tagged outcome (:class:`Ok`,
:class:`TransientErr`, :class:`FatalErr`) and the policy decides from the tag
alone. Only :class:`TransientGatewayError` is retried; the wait before attempt
``n + 1`` is ``base_delay_ms * 2 ** (n - 1)`` milliseconds.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from econchat.errors import TransientGatewayError
from econchat.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class TransientErr:
    error: TransientGatewayError


@dataclass(frozen=True, slots=True)
class FatalErr:
    error: Exception


Attempt = Ok | TransientErr | FatalErr


async def attempt(call: Callable[[], Awaitable[T]]) -> Attempt:
    try:
        return Ok(await call())
    except TransientGatewayError as e:
        return TransientErr(e)
    except Exception as e:
        return FatalErr(e)


class RetryPolicy:
    """Retry transient gateway errors with exponential backoff."""

    def __init__(self, max_attempts: int = 3, base_delay_ms: int = 1000, sleep: SleepFn = asyncio.sleep):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self._sleep = sleep

    def delay_ms(self, attempt_number: int) -> int:
        """Wait after the failed attempt ``attempt_number`` (1-based)."""
        return self.base_delay_ms * 2 ** (attempt_number - 1)

    async def run(self, call: Callable[[], Awaitable[T]]) -> T:
        for n in range(1, self.max_attempts + 1):
            match await attempt(call):
                case Ok(value=value):
                    return value
                case FatalErr(error=error):
                    raise error
                case TransientErr(error=error):
                    if n == self.max_attempts:
                        logger.error("gateway_retries_exhausted", attempts=n, error=str(error))
                        raise error
                    delay = self.delay_ms(n)
                    logger.warning(
                        "gateway_transient_error",
                        attempt=n,
                        max_attempts=self.max_attempts,
                        delay_ms=delay,
                        error=str(error),
                    )
                    await self._sleep(delay / 1000)
        raise AssertionError("unreachable")


NO_RETRY = RetryPolicy(max_attempts=1)
