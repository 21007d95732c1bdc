from pydantic import BaseModel

from enums.notification_level import NotificationLevel


class NotificationDTO(BaseModel):
    """Non-blocking message for the UI layer (rendered as a toast)."""
    level: NotificationLevel
    title: str
    text: str = ""
