# Services for complaint intake and lifecycle
from nagrik.services.complaint_store import ComplaintStore
from nagrik.services.media_gate import MediaAnalysisGate
from nagrik.services.complaint_draft import ComplaintDraft
from nagrik.services.notification_service import NotificationService
from nagrik.services.notification_scheduler import NotificationScheduler
from nagrik.services.submission_pipeline import SubmissionPipeline
from nagrik.services.firebase_storage import FirebaseStorageService, get_storage_service

__all__ = [
    "ComplaintStore",
    "MediaAnalysisGate",
    "ComplaintDraft",
    "NotificationService",
    "NotificationScheduler",
    "SubmissionPipeline",
    "FirebaseStorageService", "get_storage_service",
]
