"""
AgentFlow - API Client

This module provides the async HTTP client used to talk to the AgentFlow
REST API. It owns base URL resolution, auth headers, timeouts and
transport retries; callers only see parsed JSON or AgentFlow exceptions.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import httpx
import structlog

from agentflow import __version__
from agentflow.config import Settings
from agentflow.exceptions import AuthenticationError, NetworkError, ServerError

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000"


class AsyncAgentFlowClient:
    """
    Async client for the AgentFlow API.

    Args:
        api_key: API key sent as a bearer token. Falls back to the
            AGENTFLOW_API_KEY environment variable; requests are sent
            without an Authorization header when neither is set.
        base_url: The base URL for the API.
        timeout: Request timeout in seconds.
        max_retries: Connection retry attempts made by the transport.
        organization_id: Organization ID for multi-tenant requests.

    Example:
        >>> async with AsyncAgentFlowClient(api_key="your-api-key") as client:
        ...     state = await client.request("GET", "/api/onboarding")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        organization_id: Optional[str] = None,
    ) -> None:
        self._api_key = api_key or os.environ.get("AGENTFLOW_API_KEY")
        self._base_url = base_url or os.environ.get("AGENTFLOW_API_BASE_URL", DEFAULT_BASE_URL)
        self._timeout = timeout
        self._max_retries = max_retries
        self._organization_id = organization_id
        self._http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "AsyncAgentFlowClient":
        """Build a client from application settings."""
        return cls(
            api_key=settings.api_key,
            base_url=settings.api_base_url,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            organization_id=settings.organization_id,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def _build_headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"agentflow-python/{__version__}",
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        if self._organization_id:
            headers["X-Organization-ID"] = self._organization_id
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._http_client is None:
            transport = httpx.AsyncHTTPTransport(retries=self._max_retries)
            self._http_client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._build_headers(),
                timeout=httpx.Timeout(self._timeout),
                transport=transport,
                follow_redirects=True,
            )
        return self._http_client

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE, PATCH)
            path: API endpoint path
            params: Query parameters
            json: JSON body data

        Returns:
            Decoded JSON body, ``{}`` for empty responses

        Raises:
            NetworkError: If no response was received
            AuthenticationError: If the API rejects the credentials
            ServerError: For any other non-success status
        """
        client = await self._get_client()
        logger.debug("api_request", method=method, path=path)

        try:
            response = await client.request(method=method, url=path, params=params, json=json)
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request timed out: {e}", timeout=True) from e
        except httpx.RequestError as e:
            raise NetworkError(f"Request failed: {e}") from e

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Any:
        """Handle API response and raise appropriate exceptions."""
        logger.debug("api_response", status_code=response.status_code, path=response.request.url.path)

        if response.status_code == 204 or (response.is_success and not response.content):
            return {}

        if response.is_success:
            if response.headers.get("content-type", "").startswith("application/json"):
                return response.json()
            return {"data": response.text}

        try:
            error_data = response.json()
            error_message = error_data.get("detail") or error_data.get("message") or str(error_data)
        except (ValueError, AttributeError):
            error_message = response.text or f"HTTP {response.status_code}"

        request_id = response.headers.get("X-Request-ID")

        if response.status_code == 401:
            raise AuthenticationError(error_message, status_code=401, request_id=request_id)
        elif response.status_code == 403:
            raise AuthenticationError(f"Forbidden: {error_message}", status_code=403, request_id=request_id)
        raise ServerError(error_message, status_code=response.status_code, request_id=request_id)

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("client_closed")

    async def __aenter__(self) -> "AsyncAgentFlowClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"AsyncAgentFlowClient(base_url='{self._base_url}')"
