# backend/pokebattle/resilience.py
"""
Retry and per-item failure isolation helpers.

Failures travel as explicit `Result` values: `attempt` retries an async
operation with a backoff and returns the last error instead of raising it,
and `best_effort_map` turns failed items into omissions or substitutes.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterable, List, Optional, Tuple, Type, TypeVar

from .exceptions import PokeAPIConnectionError, PokeAPIStatusError

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

# Transport failures and non-success status codes are worth another try
RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (PokeAPIConnectionError, PokeAPIStatusError)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a fallible operation: either a value or the error that stopped it."""
    value: Optional[T] = None
    error: Optional[BaseException] = None
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T, attempts: int = 1) -> "Result[T]":
        return cls(value=value, attempts=attempts)

    @classmethod
    def failure(cls, error: BaseException, attempts: int = 1) -> "Result[T]":
        return cls(error=error, attempts=attempts)

    def unwrap(self) -> T:
        """Returns the value, raising the stored error if there is none."""
        if self.error is not None:
            raise self.error
        return self.value


def linear_backoff(base_seconds: float) -> Callable[[int], float]:
    """Backoff waiting base_seconds * attempt_number (1s, 2s, ... for base 1.0)."""
    def _delay(attempt_number: int) -> float:
        return base_seconds * attempt_number
    return _delay


async def attempt(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    backoff: Callable[[int], float] = linear_backoff(1.0),
    retry_on: Tuple[Type[BaseException], ...] = RETRYABLE_ERRORS,
    sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
) -> Result[T]:
    """
    Runs `operation` up to `max_attempts` times.

    Errors listed in `retry_on` are retried after waiting `backoff(attempt_number)`;
    there is no wait after the final attempt. Any other exception propagates.

    Returns:
        A successful Result holding the operation's value, or a failed Result
        holding the last retryable error once all attempts are used up.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    last_error: Optional[BaseException] = None
    for attempt_number in range(1, max_attempts + 1):
        try:
            value = await operation()
        except retry_on as e:
            last_error = e
            if attempt_number == max_attempts:
                break
            delay = backoff(attempt_number)
            logger.warning(f"Attempt {attempt_number}/{max_attempts} failed: {e}. Retrying in {delay:.1f}s")
            await (sleep or asyncio.sleep)(delay)
            continue
        return Result.success(value, attempts=attempt_number)

    logger.error(f"Giving up after {max_attempts} attempts: {last_error}")
    return Result.failure(last_error, attempts=max_attempts)


async def best_effort_map(
    items: Iterable[U],
    operation: Callable[[U], Awaitable[Result[T]]],
    substitute: Optional[Callable[[U, BaseException], T]] = None,
    delay: float = 0.0,
    sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
) -> List[T]:
    """
    Applies `operation` to each item strictly one after another, keeping input order.

    A failed Result is dropped from the output, or replaced by
    `substitute(item, error)` when a substitute is given. `delay` seconds are
    slept before each item.
    """
    results: List[T] = []
    for item in items:
        if delay > 0:
            await (sleep or asyncio.sleep)(delay)
        outcome = await operation(item)
        if outcome.ok:
            results.append(outcome.value)
        elif substitute is not None:
            logger.warning(f"Substituting placeholder for {item!r}: {outcome.error}")
            results.append(substitute(item, outcome.error))
        else:
            logger.warning(f"Skipping {item!r}: {type(outcome.error).__name__}: {outcome.error}")
    return results
