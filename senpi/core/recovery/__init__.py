"""
Error Recovery Module

Error classification and retry strategies for outbound calls made by
providers and plugin actions.
"""

from .errors import (
    ErrorCategory,
    ErrorContext,
    RecoverableError,
    UnrecoverableError,
    RateLimitError,
    NetworkError,
    ProviderTimeoutError,
    GraphQLResponseError,
    classify_error,
)
from .strategies import (
    RetryConfig,
    RecoveryStrategy,
    RetryStrategy,
    ExponentialBackoffStrategy,
    FixedDelayStrategy,
    fetch_with_retries,
)

__all__ = [
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "RecoverableError",
    "UnrecoverableError",
    "RateLimitError",
    "NetworkError",
    "ProviderTimeoutError",
    "GraphQLResponseError",
    "classify_error",
    # Strategies
    "RetryConfig",
    "RecoveryStrategy",
    "RetryStrategy",
    "ExponentialBackoffStrategy",
    "FixedDelayStrategy",
    "fetch_with_retries",
]
