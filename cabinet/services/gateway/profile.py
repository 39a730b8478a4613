from ...models.user import UserProfile, normalize_profile
from ...schemas.auth import ProfileUpdate
from .base import BaseGateway


class ProfileGateway(BaseGateway):
    async def get_profile(self) -> UserProfile:
        return normalize_profile(await self._get("/users/profile") or {})

    async def update_profile(self, update: ProfileUpdate) -> UserProfile:
        data = await self._put("/users/profile", update.model_dump(exclude_none=True))
        # The backend wraps the updated record in ``user``
        user = data.get("user") if isinstance(data, dict) else None
        return normalize_profile(user or {})

    async def delete_profile(self) -> None:
        await self._delete("/users/profile")
