from pydantic import BaseModel

from src.portal.models.enums import NotificationCategory


class NotificationCountsRead(BaseModel):
    counts: dict[NotificationCategory, int]
    total: int
