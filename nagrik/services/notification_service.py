"""
Lifecycle notifications for complaint reporters.
Messages are stored in-app; push/email delivery can read from the same table later.
"""

from typing import Optional
from uuid import UUID

from nagrik.models.notification import Notification, NotificationStage
from nagrik.services.complaint_store import ComplaintStore


def build_message(stage: NotificationStage, complaint_code: str, issue_type: str) -> str:
    if stage == NotificationStage.CONFIRMATION:
        return (
            f"Your complaint {complaint_code} for {issue_type} has been registered successfully. "
            "We will review it shortly."
        )
    if stage == NotificationStage.ACKNOWLEDGEMENT:
        return (
            f"Your complaint {complaint_code} has been acknowledged and assigned "
            "to the appropriate department."
        )
    return f"Your complaint {complaint_code} has been resolved. Thank you for your patience."


class NotificationService:
    """Service for creating lifecycle notifications"""

    def __init__(self, store: ComplaintStore):
        self.store = store

    async def notify_stage(
        self,
        complaint_id: UUID,
        complaint_code: str,
        issue_type: str,
        stage: NotificationStage,
        user_id: str = "anonymous",
    ) -> Optional[Notification]:
        """Persist the notification for one stage; None if it already exists"""
        return await self.store.insert_notification(
            complaint_id=complaint_id,
            complaint_code=complaint_code,
            stage=stage,
            message=build_message(stage, complaint_code, issue_type),
            user_id=user_id,
        )
