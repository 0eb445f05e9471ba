"""Pydantic schemas for notifications"""

from typing import List
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel

from nagrik.models.notification import NotificationStage


class NotificationResponse(BaseModel):
    """Schema for notification response"""

    id: UUID
    complaint_id: UUID
    complaint_code: str
    user_id: str
    stage: NotificationStage
    message: str
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationList(BaseModel):
    """Schema for paginated notification list"""

    items: List[NotificationResponse]
    total: int
    unread_count: int
    skip: int
    limit: int
