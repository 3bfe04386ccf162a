from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional

from leavedesk.models.notification import NotificationType


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    recipient_id: int
    type: NotificationType
    content: str
    related_leave_id: Optional[int] = None
    link: Optional[str] = None
    read: bool
    created_at: Optional[datetime] = None
