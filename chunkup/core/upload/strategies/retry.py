"""Retry strategies using Strategy Pattern."""
import asyncio
from abc import ABC, abstractmethod


class RetryStrategy(ABC):
    """Abstract retry strategy for chunk transfers."""

    def should_retry(self, attempts: int, max_attempts: int) -> bool:
        """Determines if another attempt should be made after `attempts` failures."""
        return attempts < max_attempts

    @abstractmethod
    def delay(self, attempts: int) -> float:
        """Returns the delay in seconds before the next attempt."""
        pass

    async def wait(self, attempts: int):
        """Waits before retry."""
        delay = self.delay(attempts)
        if delay > 0:
            await asyncio.sleep(delay)


class ImmediateRetryStrategy(RetryStrategy):
    """Retries right away, without any delay."""

    def delay(self, attempts: int) -> float:
        return 0.0


class ExponentialBackoffStrategy(RetryStrategy):
    """Exponential backoff retry strategy."""

    def __init__(
        self,
        base_delay: float = 0.25,
        max_delay: float = 16.0,
        exponential_base: float = 2.0
    ):
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base

    def delay(self, attempts: int) -> float:
        """Calculate delay after the given number of failed attempts."""
        delay = self.base_delay * (self.exponential_base ** max(attempts - 1, 0))
        return min(delay, self.max_delay)
