import logging
import time

from fastapi import APIRouter, Depends

from ...api.deps import get_auth_gateway, get_current_session, rate_limit_check
from ...core.cache import get_redis, revoke_session
from ...core.security import Session, SessionToken, create_session_token
from ...schemas.auth import ForgotPasswordRequest, LoginRequest, RegisterRequest
from ...services.gateway import AuthGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/login", response_model=SessionToken)
async def login(
    login_data: LoginRequest,
    auth_gateway: AuthGateway = Depends(get_auth_gateway),
):
    """Authenticate against the backend and open a portal session."""
    result = await auth_gateway.login(login_data.email, login_data.mot_de_passe)
    return create_session_token(result.user_id, result.role, result.token)

@router.post("/register", status_code=201)
async def register(
    register_data: RegisterRequest,
    auth_gateway: AuthGateway = Depends(get_auth_gateway),
    _: None = Depends(rate_limit_check)
):
    """Create a doctor or patient account."""
    await auth_gateway.register(register_data)
    return {"message": "Inscription réussie ! Vous pouvez maintenant vous connecter."}

@router.post("/forgot-password")
async def forgot_password(
    reset_data: ForgotPasswordRequest,
    auth_gateway: AuthGateway = Depends(get_auth_gateway),
    _: None = Depends(rate_limit_check)
):
    """Request a password reset email."""
    await auth_gateway.forgot_password(reset_data.email)
    return {"message": "Si l'adresse existe, un email de réinitialisation a été envoyé."}

@router.post("/logout")
async def logout(
    session: Session = Depends(get_current_session),
    redis_client=Depends(get_redis),
):
    """Revoke the current session until it would have expired anyway."""
    ttl = int(session.exp - time.time()) if session.exp else 0
    revoke_session(redis_client, session.jti, ttl)
    logger.info(f"Session closed for {session.role.value} {session.user_id}")
    return {"message": "Déconnexion réussie"}

@router.get("/me")
async def get_current_session_info(
    session: Session = Depends(get_current_session)
):
    """Who the bearer of this session is."""
    return {
        "valid": True,
        "user_id": session.user_id,
        "role": session.role,
        "expires": session.exp,
    }
