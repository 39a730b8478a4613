"""Unauthenticated account endpoints: login, registration, password reset."""

import logging

from ...core.exceptions import BackendError
from ...core.http import BackendClient
from ...core.security import UserRole
from ...schemas.auth import RegisterRequest

logger = logging.getLogger(__name__)


class LoginResult:
    def __init__(self, token: str, role: UserRole, user_id: str):
        self.token = token
        self.role = role
        self.user_id = user_id


class AuthGateway:
    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def login(self, email: str, mot_de_passe: str) -> LoginResult:
        """Exchange credentials for the backend's ``{token, role, _id}`` triple."""
        data = await self.backend.post("/users/login", json={"email": email, "motDePasse": mot_de_passe})
        if not isinstance(data, dict) or not data.get("token"):
            raise BackendError(502, "Réponse de connexion invalide", data)
        try:
            role = UserRole(data.get("role"))
        except ValueError:
            raise BackendError(502, f"Rôle inconnu: {data.get('role')}", data)
        logger.info(f"Backend login succeeded for role {role.value}")
        return LoginResult(token=data["token"], role=role, user_id=str(data.get("_id") or ""))

    async def register(self, request: RegisterRequest) -> None:
        await self.backend.post("/users/register", json=request.to_backend())

    async def forgot_password(self, email: str) -> None:
        await self.backend.post("/users/forget-password", json={"email": email})
