"""HTTP client for the cheqd Studio API.

Every request carries the caller's ``x-api-key`` header. Calls are POSTs that
create remote resources, so they are never retried; an explicit timeout and
the shared circuit breaker bound how long a request can wait on the service.
"""

import logging
from typing import Any, Optional

import httpx

from app.cheqd.circuit import CircuitBreaker, get_circuit_breaker
from app.config import CHEQD_NETWORK, CHEQD_STUDIO_API, CHEQD_TIMEOUT_SECONDS
from app.core.exceptions import ExternalServiceError

log = logging.getLogger(__name__)


class CheqdStudioClient:
    """Thin async wrapper around the cheqd Studio REST API."""

    def __init__(
        self,
        api_key: str,
        network: str = CHEQD_NETWORK,
        base_url: str = CHEQD_STUDIO_API,
        timeout: float = CHEQD_TIMEOUT_SECONDS,
        breaker: Optional[CircuitBreaker] = None,
    ):
        """Initialize the client.

        Args:
            api_key: Caller's cheqd Studio API key (forwarded, not stored)
            network: Target network (testnet or mainnet)
            base_url: Studio API root URL
            timeout: Per-request timeout in seconds
            breaker: Circuit breaker shared across requests
        """
        self.api_key = api_key
        self.network = network
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._breaker = breaker or get_circuit_breaker()
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                headers={"x-api-key": self.api_key},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "CheqdStudioClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def post(
        self,
        path: str,
        failure_message: str,
        *,
        json: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        """POST to a Studio endpoint and return the decoded JSON body.

        Args:
            path: Endpoint path (e.g. ``/key``)
            failure_message: Prefix for the error raised on failure
            json: JSON body
            data: Form-encoded body
            params: Query string parameters

        Raises:
            ExternalServiceError: On non-2xx status, network error, timeout,
                undecodable body, or an open circuit
        """
        await self._breaker.before_call()

        try:
            client = await self._get_client()
            response = await client.post(path, json=json, data=data, params=params)
        except httpx.TimeoutException as e:
            await self._breaker.record_failure()
            raise ExternalServiceError(f"{failure_message}: request timed out") from e
        except httpx.RequestError as e:
            await self._breaker.record_failure()
            raise ExternalServiceError(f"{failure_message}: {e}") from e
        except BaseException:
            # Cancelled or unexpected error: the breaker must not stay half-open
            self._breaker.abandon_trial()
            raise

        if response.is_server_error:
            await self._breaker.record_failure()
        else:
            # 4xx means the service answered; do not count it against the circuit
            await self._breaker.record_success()

        if not response.is_success:
            body = response.text
            log.warning(f"cheqd Studio {path} returned {response.status_code}: {body[:200]}")
            raise ExternalServiceError(
                f"{failure_message}: {body}",
                body=body,
                remote_status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError(f"{failure_message}: invalid JSON response") from e
