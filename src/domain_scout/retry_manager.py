"""
Retry Manager for the domain scout system.

Retry logic with exponential backoff for transient errors, used by the
offline price refresh job when fetching registrar pages. Exhausted retries
are reported as a failed RetryResult, never raised.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from .exceptions import DomainScoutError

T = TypeVar("T")


@dataclass
class RetryResult(Generic[T]):
    """Result of a retry operation."""

    success: bool
    result: Optional[T]
    attempts: int
    last_error: Optional[Exception]


class RetryManager:
    """
    Manages retry logic with exponential backoff.

    Total attempts are one initial attempt plus ``max_retries``.
    """

    TRANSIENT_ERROR_CODES = {
        "timeout",
        "server_error",
        "rate_limited",
        "network_error",
    }

    def __init__(
        self,
        max_retries: int = 2,
        base_delay_seconds: float = 1.0,
        max_delay_seconds: float = 30.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Args:
            max_retries: Retries after the first attempt
            base_delay_seconds: Delay before the first retry
            max_delay_seconds: Upper bound on any single delay
            sleep: Awaitable sleep, injectable for tests
        """
        self._max_retries = max_retries
        self._base_delay_seconds = base_delay_seconds
        self._max_delay_seconds = max_delay_seconds
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self._max_retries + 1

    def calculate_delay(self, attempt: int) -> float:
        """
        Wait time before retry number ``attempt + 1``.

        delay(n) = base_delay * 2^n, capped at max_delay.
        """
        delay = self._base_delay_seconds * (2 ** attempt)
        return min(delay, self._max_delay_seconds)

    def is_retryable_error(self, error: Exception) -> bool:
        """Domain errors retry only for transient codes; anything else retries."""
        if isinstance(error, DomainScoutError):
            return error.code in self.TRANSIENT_ERROR_CODES
        return True

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        is_retryable: Optional[Callable[[Exception], bool]] = None,
    ) -> RetryResult[T]:
        """
        Execute an operation with retry logic and exponential backoff.

        Args:
            operation: The async operation to execute
            is_retryable: Optional predicate for exceptions; defaults to
                is_retryable_error

        Returns:
            RetryResult containing success status, result, attempts, and last error
        """
        check = is_retryable or self.is_retryable_error
        last_error: Optional[Exception] = None
        attempts = 0

        while attempts < self.max_attempts:
            try:
                result = await operation()
                return RetryResult(
                    success=True,
                    result=result,
                    attempts=attempts + 1,
                    last_error=None,
                )
            except Exception as e:
                last_error = e
                attempts += 1

                if not check(e) or attempts >= self.max_attempts:
                    break

                await self._sleep(self.calculate_delay(attempts - 1))

        return RetryResult(
            success=False,
            result=None,
            attempts=attempts,
            last_error=last_error,
        )
