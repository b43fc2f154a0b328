import logging
from typing import Any, Dict, Optional

import httpx

from ..core.recovery import (
    GraphQLResponseError,
    NetworkError,
    ProviderTimeoutError,
    RateLimitError,
)
from .base import Provider

logger = logging.getLogger(__name__)


class GraphQLProvider(Provider):
    """Shared POST transport for the GraphQL backends (Senpi API, Codex)"""

    timeout_s = 30

    async def _execute(
        self,
        url: str,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        operation: Optional[str] = None,
    ) -> Dict[str, Any]:
        """POST a query and return its ``data`` payload.

        Transport failures are raised as recoverable errors so callers can
        retry them; an ``errors`` array in the body is raised as
        ``GraphQLResponseError`` with the first message.
        """
        if not url:
            raise NetworkError(f"{self.name} endpoint is not configured", provider=self.name)

        request_headers = {"Content-Type": "application/json"}
        if headers:
            request_headers.update(headers)

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url,
                    json={"query": query, "variables": variables or {}},
                    headers=request_headers,
                    timeout=self.timeout_s,
                )
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(f"{self.name} request timed out: {e}", provider=self.name) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"{self.name} request failed: {e}", provider=self.name) from e

        if response.status_code == 429:
            retry_after = response.headers.get("retry-after")
            raise RateLimitError(
                f"{self.name} rate limit exceeded",
                retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None,
                provider=self.name,
            )

        if response.status_code >= 400:
            raise NetworkError(
                f"{self.name} returned {response.status_code} {response.reason_phrase}",
                provider=self.name,
                status_code=response.status_code,
            )

        payload = response.json()
        errors = payload.get("errors")
        if errors:
            message = errors[0].get("message", "Unknown GraphQL error")
            logger.error(f"{self.name} {operation or 'query'} failed: {message}")
            raise GraphQLResponseError(message, provider=self.name, operation=operation)

        return payload.get("data") or {}
