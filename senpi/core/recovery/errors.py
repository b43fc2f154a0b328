"""
Error Classification

Error types shared by providers and actions. Errors are either recoverable
(the outbound call may be retried) or unrecoverable (retrying cannot help).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Categories of errors for retry decisions."""

    NETWORK = "network"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    PROVIDER = "provider"         # Backend answered with an error payload
    VALIDATION = "validation"     # Bad input, never retried
    AUTHENTICATION = "authentication"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Additional context about an error."""

    category: ErrorCategory = ErrorCategory.UNKNOWN
    recoverable: bool = True
    retry_after_seconds: Optional[float] = None
    suggested_action: Optional[str] = None
    provider: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class RecoverableError(Exception):
    """
    Base class for errors that can be retried.

    Typically transient: connection resets, rate limits, timeouts and
    5xx responses from the Senpi API, Codex or the Base RPC.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        retry_after: Optional[float] = None,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.retry_after = retry_after
        self.context = context or ErrorContext(category=category, recoverable=True)


class UnrecoverableError(Exception):
    """
    Base class for errors that cannot be retried.

    GraphQL error payloads, invalid inputs and insufficient balances all
    need a different request, not another attempt.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.context = context or ErrorContext(category=category, recoverable=False)


class RateLimitError(RecoverableError):
    """API rate limit exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[float] = None,
        provider: Optional[str] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.RATE_LIMIT,
            retry_after=retry_after,
            context=ErrorContext(
                category=ErrorCategory.RATE_LIMIT,
                recoverable=True,
                retry_after_seconds=retry_after,
                provider=provider,
                suggested_action="Wait before retrying",
            ),
        )


class NetworkError(RecoverableError):
    """Network connectivity error or 5xx response."""

    def __init__(
        self,
        message: str = "Network error",
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.NETWORK,
            context=ErrorContext(
                category=ErrorCategory.NETWORK,
                recoverable=True,
                provider=provider,
                suggested_action="Retry with backoff",
                details={"status_code": status_code} if status_code else {},
            ),
        )


class ProviderTimeoutError(RecoverableError):
    """Outbound request timed out."""

    def __init__(
        self,
        message: str = "Request timed out",
        provider: Optional[str] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.TIMEOUT,
            context=ErrorContext(
                category=ErrorCategory.TIMEOUT,
                recoverable=True,
                provider=provider,
                suggested_action="Retry with longer timeout",
            ),
        )


class GraphQLResponseError(UnrecoverableError):
    """A GraphQL endpoint answered with an `errors` array."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.PROVIDER,
            context=ErrorContext(
                category=ErrorCategory.PROVIDER,
                recoverable=False,
                provider=provider,
                details={"operation": operation} if operation else {},
            ),
        )


def classify_error(error: Exception) -> ErrorContext:
    """
    Classify an exception and return its error context.

    Already-classified errors keep their own context; anything else is
    matched on its message.
    """
    if isinstance(error, (RecoverableError, UnrecoverableError)):
        return error.context

    message = str(error).lower()

    rate_limit_patterns = ["rate limit", "too many requests", "429", "throttl", "quota exceeded"]
    if any(p in message for p in rate_limit_patterns):
        return ErrorContext(
            category=ErrorCategory.RATE_LIMIT,
            recoverable=True,
            suggested_action="Wait before retrying",
        )

    network_patterns = ["connection", "network", "unreachable", "refused", "dns", "socket", "ssl"]
    if any(p in message for p in network_patterns):
        return ErrorContext(
            category=ErrorCategory.NETWORK,
            recoverable=True,
            suggested_action="Check network connectivity",
        )

    timeout_patterns = ["timeout", "timed out", "deadline"]
    if any(p in message for p in timeout_patterns):
        return ErrorContext(
            category=ErrorCategory.TIMEOUT,
            recoverable=True,
            suggested_action="Retry with longer timeout",
        )

    funds_patterns = ["insufficient", "not enough", "exceeds balance"]
    if any(p in message for p in funds_patterns):
        return ErrorContext(
            category=ErrorCategory.INSUFFICIENT_FUNDS,
            recoverable=False,
            suggested_action="Add funds to wallet",
        )

    auth_patterns = ["unauthorized", "forbidden", "401", "403"]
    if any(p in message for p in auth_patterns):
        return ErrorContext(
            category=ErrorCategory.AUTHENTICATION,
            recoverable=False,
            suggested_action="Check the authorization header",
        )

    # Unknown errors default to retryable
    return ErrorContext(
        category=ErrorCategory.UNKNOWN,
        recoverable=True,
        suggested_action="Retry operation",
    )
