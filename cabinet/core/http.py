"""Async HTTP access to the practice backend."""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

import httpx

from .config import settings
from .exceptions import BackendError, BackendUnavailableError

logger = logging.getLogger(__name__)


class BackendClient:
    """Thin wrapper around ``httpx.AsyncClient``.

    Builds URLs against the configured base, attaches the bearer token,
    parses JSON and turns failures into ``BackendError`` /
    ``BackendUnavailableError``. No retries, no caching.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        token: Optional[str] = None,
        json: Optional[Any] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (or None when empty)."""
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(
                method,
                endpoint,
                headers=headers,
                json=json,
                data=data,
                files=files,
                params=params,
            )
        except httpx.RequestError as e:
            logger.error(f"Request error calling {method} {endpoint}: {e}")
            raise BackendUnavailableError("Le serveur est injoignable. Veuillez réessayer plus tard.")

        if response.is_error:
            payload = self._decode(response)
            logger.error(f"Server response for {method} {endpoint}: {response.status_code} - {payload}")
            raise BackendError(response.status_code, self._error_message(response, payload), payload)

        return self._decode(response)

    async def get(self, endpoint: str, token: Optional[str] = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", endpoint, token=token, params=params)

    async def post(self, endpoint: str, json: Optional[Any] = None, token: Optional[str] = None, **kwargs) -> Any:
        return await self.request("POST", endpoint, token=token, json=json, **kwargs)

    async def put(self, endpoint: str, json: Optional[Any] = None, token: Optional[str] = None) -> Any:
        return await self.request("PUT", endpoint, token=token, json=json)

    async def delete(self, endpoint: str, token: Optional[str] = None) -> Any:
        return await self.request("DELETE", endpoint, token=token)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _error_message(response: httpx.Response, payload: Any) -> str:
        if isinstance(payload, dict):
            for key in ("message", "error", "detail"):
                if isinstance(payload.get(key), str) and payload[key]:
                    return payload[key]
        if isinstance(payload, str) and payload:
            return payload
        return f"Erreur HTTP {response.status_code}"


async def get_backend() -> AsyncGenerator[BackendClient, None]:
    """Get a backend client for the duration of one request."""
    client = BackendClient(settings.API_BASE_URL, timeout=settings.HTTP_TIMEOUT)
    try:
        yield client
    finally:
        await client.aclose()
