from typing import Any, Dict, Optional

from ...core.http import BackendClient
from ...core.security import Session


class BaseGateway:
    """Shared plumbing: every call carries the session's backend token."""

    def __init__(self, backend: BackendClient, session: Session):
        self.backend = backend
        self.session = session

    @property
    def token(self) -> str:
        return self.session.backend_token

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.backend.get(endpoint, token=self.token, params=params)

    async def _post(self, endpoint: str, json: Optional[Any] = None, **kwargs) -> Any:
        return await self.backend.post(endpoint, json=json, token=self.token, **kwargs)

    async def _put(self, endpoint: str, json: Optional[Any] = None) -> Any:
        return await self.backend.put(endpoint, json=json if json is not None else {}, token=self.token)

    async def _delete(self, endpoint: str) -> Any:
        return await self.backend.delete(endpoint, token=self.token)
