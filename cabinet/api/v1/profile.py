import time

from fastapi import APIRouter, Depends

from ...api.deps import get_current_session, get_profile_gateway
from ...core.cache import get_redis, revoke_session
from ...core.exceptions import ConfirmationRequiredError
from ...core.security import Session
from ...models.user import UserProfile
from ...schemas.auth import ProfileUpdate
from ...services.gateway import ProfileGateway

router = APIRouter(prefix="/profile", tags=["Profile"])

@router.get("", response_model=UserProfile)
async def get_profile(profiles: ProfileGateway = Depends(get_profile_gateway)):
    return await profiles.get_profile()

@router.put("", response_model=UserProfile)
async def update_profile(
    update: ProfileUpdate,
    profiles: ProfileGateway = Depends(get_profile_gateway),
):
    return await profiles.update_profile(update)

@router.delete("")
async def delete_profile(
    confirm: bool = False,
    profiles: ProfileGateway = Depends(get_profile_gateway),
    session: Session = Depends(get_current_session),
    redis_client=Depends(get_redis),
):
    """Delete the account; the session is closed with it."""
    if not confirm:
        raise ConfirmationRequiredError("Voulez-vous vraiment supprimer votre profil ? Cette action est irréversible.")
    await profiles.delete_profile()
    revoke_session(redis_client, session.jti, int(session.exp - time.time()) if session.exp else 0)
    return {"message": "Profil supprimé"}
