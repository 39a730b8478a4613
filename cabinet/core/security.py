from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from fastapi import HTTPException, status
from fastapi.security import HTTPBearer
from pydantic import BaseModel
import uuid
from enum import Enum

from .config import settings

# Bearer scheme for portal session tokens
security = HTTPBearer()

class UserRole(str, Enum):
    DOCTOR = "Medecin"
    SECRETARY = "Secretaire"
    PATIENT = "Patient"

class Session(BaseModel):
    """Authenticated actor, passed explicitly to everything that talks to the backend."""
    user_id: str
    role: UserRole
    backend_token: str
    jti: str
    exp: Optional[int] = None

class SessionToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    role: UserRole
    user_id: str

# JWT utilities
def create_session_token(
    user_id: str,
    role: UserRole,
    backend_token: str,
    expires_delta: Optional[timedelta] = None
) -> SessionToken:
    """Wrap the backend login triple (token, role, id) in a signed session token."""
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.SESSION_EXPIRE_MINUTES
        )

    to_encode = {
        "sub": user_id,
        "role": role.value,
        "backend_token": backend_token,
        "jti": uuid.uuid4().hex,
        "exp": expire,
        "token_type": "session",
    }

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return SessionToken(
        access_token=encoded_jwt,
        expires_in=int((expires_delta or timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)).total_seconds()),
        role=role,
        user_id=user_id,
    )

def verify_session_token(token: str) -> Optional[Session]:
    """Verify and decode a session token."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        return None

    if payload.get("token_type") != "session":
        return None

    try:
        return Session(
            user_id=payload["sub"],
            role=UserRole(payload["role"]),
            backend_token=payload["backend_token"],
            jti=payload["jti"],
            exp=payload.get("exp"),
        )
    except (KeyError, ValueError):
        return None

# Security exceptions
class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "Not enough permissions"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )
