from nagrik.schemas.complaint import (
    ComplaintForm, MediaAttachment, ComplaintReceipt, ComplaintOut,
    StatusUpdateOut, StatusHistoryResponse,
)
from nagrik.schemas.ai_outputs import ImageRelevanceOutput, MediaAnalysisResult
from nagrik.schemas.notification import NotificationResponse, NotificationList

__all__ = [
    "ComplaintForm", "MediaAttachment", "ComplaintReceipt", "ComplaintOut",
    "StatusUpdateOut", "StatusHistoryResponse",
    "ImageRelevanceOutput", "MediaAnalysisResult",
    "NotificationResponse", "NotificationList",
]
