"""
Retry Strategies

Retry loops used around every outbound call (GraphQL, JSON-RPC, pricing).
"""

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, Dict, Optional, TypeVar

from .errors import RecoverableError, UnrecoverableError, classify_error

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    initial_delay_seconds: float = 1.0
    max_delay_seconds: float = 60.0
    exponential_base: float = 2.0
    jitter: bool = False
    jitter_factor: float = 0.1

    def get_delay(self, attempt: int) -> float:
        """Delay before retrying after the given (zero-based) attempt."""
        delay = min(
            self.initial_delay_seconds * (self.exponential_base ** attempt),
            self.max_delay_seconds,
        )
        if self.jitter:
            jitter_range = delay * self.jitter_factor
            delay += random.uniform(-jitter_range, jitter_range)
        return max(delay, 0)


class RecoveryStrategy(ABC):
    """Base class for recovery strategies."""

    @abstractmethod
    async def execute(
        self,
        operation: Callable[[], Coroutine[Any, Any, T]],
        context: Optional[Dict[str, Any]] = None,
    ) -> T:
        """Execute an operation with this recovery strategy."""
        pass

    @abstractmethod
    def should_retry(self, error: Exception, attempt: int) -> bool:
        """Determine if the operation should be retried."""
        pass


class RetryStrategy(RecoveryStrategy):
    """
    Retry strategy with configurable attempts and delay growth.

    Unrecoverable errors propagate immediately; recoverable and
    unclassified errors are retried until attempts run out, then the
    last error is raised.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or RetryConfig()
        self.logger = logger or logging.getLogger(__name__)

    async def execute(
        self,
        operation: Callable[[], Coroutine[Any, Any, T]],
        context: Optional[Dict[str, Any]] = None,
    ) -> T:
        label = (context or {}).get("operation", "operation")
        last_error: Optional[Exception] = None

        for attempt in range(self.config.max_attempts):
            try:
                return await operation()
            except Exception as e:
                last_error = e

                if not self.should_retry(e, attempt):
                    raise

                delay = self._get_delay(e, attempt)
                self.logger.warning(
                    f"{label} attempt {attempt + 1}/{self.config.max_attempts} failed: {e}. "
                    f"Retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)

        raise last_error or RuntimeError("All retry attempts exhausted")

    def should_retry(self, error: Exception, attempt: int) -> bool:
        if attempt >= self.config.max_attempts - 1:
            return False

        if isinstance(error, UnrecoverableError):
            return False

        if isinstance(error, RecoverableError):
            return True

        return classify_error(error).recoverable

    def _get_delay(self, error: Exception, attempt: int) -> float:
        if isinstance(error, RecoverableError) and error.retry_after:
            return min(error.retry_after, self.config.max_delay_seconds)
        return self.config.get_delay(attempt)


class ExponentialBackoffStrategy(RetryStrategy):
    """
    Doubling delays between attempts (1s, 2s, 4s ... by default).

    Used for Base RPC reads and the trade analysis query.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        max_delay: float = 60.0,
        exponential_base: float = 2.0,
        logger: Optional[logging.Logger] = None,
    ):
        config = RetryConfig(
            max_attempts=max_attempts,
            initial_delay_seconds=initial_delay,
            max_delay_seconds=max_delay,
            exponential_base=exponential_base,
        )
        super().__init__(config, logger)


class FixedDelayStrategy(RetryStrategy):
    """Constant delay between attempts."""

    def __init__(
        self,
        max_attempts: int = 3,
        delay: float = 1.0,
        logger: Optional[logging.Logger] = None,
    ):
        config = RetryConfig(
            max_attempts=max_attempts,
            initial_delay_seconds=delay,
            max_delay_seconds=delay,
            exponential_base=1.0,
        )
        super().__init__(config, logger)


async def fetch_with_retries(
    operation: Callable[[], Coroutine[Any, Any, T]],
    retries: int = 3,
    delay_ms: int = 1000,
) -> T:
    """Run ``operation`` up to ``retries`` times with a fixed delay."""
    strategy = FixedDelayStrategy(max_attempts=retries, delay=delay_ms / 1000)
    return await strategy.execute(operation)
