"""Retry strategies using Strategy Pattern."""
import asyncio
from abc import ABC, abstractmethod


class RetryStrategy(ABC):
    """Abstract retry strategy."""

    max_attempts: int

    @abstractmethod
    def should_retry(self, attempt: int) -> bool:
        """Determines if another attempt should be made after a failed one."""
        pass

    @abstractmethod
    def delay(self, attempt: int) -> float:
        """Returns the wait in seconds after failed attempt number `attempt`."""
        pass

    @abstractmethod
    async def wait_async(self, attempt: int):
        """Waits before retry (async)."""
        pass


class ExponentialBackoffStrategy(RetryStrategy):
    """
    Exponential backoff retry strategy.

    Attempts are numbered from 1. After failed attempt n the wait is
    base_delay * 2 ** n seconds: 2, 4, 8, 16 with the defaults.
    No jitter and no cap beyond the attempt count.
    """

    def __init__(self, max_attempts: int = 5, base_delay: float = 1.0):
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        self.max_attempts = max_attempts
        self.base_delay = base_delay

    def should_retry(self, attempt: int) -> bool:
        """Retries until max_attempts have been made."""
        return attempt < self.max_attempts

    def delay(self, attempt: int) -> float:
        return self.base_delay * (2 ** attempt)

    async def wait_async(self, attempt: int):
        """Waits with exponential backoff (async)."""
        backoff_time = self.delay(attempt)
        if backoff_time > 0:
            await asyncio.sleep(backoff_time)
