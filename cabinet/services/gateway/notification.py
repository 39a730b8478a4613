import asyncio
import logging
from typing import Any, List

from ...core.config import settings
from ...models.notification import Notification, normalize_notifications
from .base import BaseGateway

logger = logging.getLogger(__name__)


class NotificationGateway(BaseGateway):
    """Medication reminders, served under the configured notifications path."""

    @property
    def path(self) -> str:
        return settings.NOTIFICATIONS_PATH.rstrip("/")

    async def list(self) -> List[Notification]:
        return normalize_notifications(await self._get(self.path))

    async def mark_read(self, notification_id: str) -> Any:
        return await self._put(f"{self.path}/{notification_id}/lire", {})

    async def mark_all_read(self, notifications: List[Notification]) -> int:
        """Mark every unread notification concurrently; returns how many were sent."""
        unread = [n for n in notifications if not n.lu]
        await asyncio.gather(*(self.mark_read(n.id) for n in unread))
        logger.info(f"Marked {len(unread)} notifications as read")
        return len(unread)

    async def generate(self, medicament_id: str) -> Any:
        return await self._post(f"{self.path}/generer/{medicament_id}", {})
