"""
Error taxonomy for complaint intake.

Services raise these; routers translate them into HTTP responses.
"""

from typing import List, Optional


class ComplaintPipelineError(Exception):
    """Base class for all intake and lifecycle errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(ComplaintPipelineError):
    """A required field is missing or invalid. Nothing was written."""

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class AnalysisFailed(ComplaintPipelineError):
    """The image classifier could not be reached or returned garbage.

    Callers fall back to a manually written description.
    """


class ImageIrrelevant(ComplaintPipelineError):
    """The classifier answered, and the image does not match the issue type.

    The held media reference must be discarded.
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class MediaUploadFailed(ComplaintPipelineError):
    """Blob upload failed; the submission was aborted before any write"""


class PersistenceFailed(ComplaintPipelineError):
    """The complaint row could not be inserted"""


class RoutingDegraded(ComplaintPipelineError):
    """Complaint stored, but the automatic assignment did not go through"""


class InvalidStatusTransition(ComplaintPipelineError):
    """Status change is not a forward step from the current status"""


class ComplaintNotFound(ComplaintPipelineError):
    """No complaint with the given id or code"""
