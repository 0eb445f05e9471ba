from nagrik.models.complaint import (
    Complaint, StatusUpdate, ComplaintStatus, IssueType, STATUS_TRANSITIONS
)
from nagrik.models.notification import Notification, NotificationStage, STAGE_ORDER

__all__ = [
    "Complaint", "StatusUpdate", "ComplaintStatus", "IssueType", "STATUS_TRANSITIONS",
    "Notification", "NotificationStage", "STAGE_ORDER",
]
