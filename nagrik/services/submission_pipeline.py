"""
Complaint submission pipeline.

    validate -> upload media -> insert complaint -> route -> arm notifications

Validation, upload and insert failures abort the submission with nothing
persisted. Once the complaint row exists the submission has succeeded:
routing and notification failures are logged and reported on the receipt,
never raised.
"""

import logging
from typing import List, Optional, Protocol, TYPE_CHECKING

from nagrik.core.config import settings
from nagrik.core.exceptions import (
    MediaUploadFailed, PersistenceFailed, RoutingDegraded, ValidationFailed
)
from nagrik.models.complaint import Complaint, ComplaintStatus, IssueType
from nagrik.schemas.complaint import ComplaintForm, ComplaintReceipt, MediaAttachment
from nagrik.services import routing_resolver
from nagrik.services.complaint_store import ComplaintStore
from nagrik.services.firebase_storage import build_blob_name
from nagrik.services.media_gate import parse_issue_type
from nagrik.services.notification_scheduler import NotificationScheduler

if TYPE_CHECKING:
    from nagrik.services.complaint_draft import ComplaintDraft

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("state", "city", "issue_type", "description")


class BlobStore(Protocol):
    async def put(self, name: str, data: bytes, content_type: str) -> str:
        ...


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class SubmissionPipeline:
    """Turns a finished complaint form into a stored, routed, notified complaint"""

    def __init__(
        self,
        store: ComplaintStore,
        blob_store: BlobStore,
        scheduler: NotificationScheduler,
        auto_routing: Optional[bool] = None,
        allowed_image_types: Optional[List[str]] = None,
        allowed_audio_types: Optional[List[str]] = None,
        max_upload_size: Optional[int] = None,
        media_folder: Optional[str] = None,
    ):
        self.store = store
        self.blob_store = blob_store
        self.scheduler = scheduler
        self.auto_routing = settings.AUTO_ROUTING_ENABLED if auto_routing is None else auto_routing
        self.allowed_image_types = allowed_image_types or settings.ALLOWED_IMAGE_TYPES
        self.allowed_audio_types = allowed_audio_types or settings.ALLOWED_AUDIO_TYPES
        self.max_upload_size = max_upload_size or settings.MAX_UPLOAD_SIZE
        self.media_folder = settings.MEDIA_FOLDER if media_folder is None else media_folder

    def validate(
        self,
        form: ComplaintForm,
        media: Optional[MediaAttachment] = None,
        voice_note: Optional[MediaAttachment] = None,
    ) -> IssueType:
        """Check required fields and attachments. Raises ValidationFailed."""
        missing = [name for name in REQUIRED_FIELDS if not _clean(getattr(form, name))]
        if missing:
            raise ValidationFailed("Please fill all required fields", fields=missing)

        issue_type = parse_issue_type(form.issue_type)
        if media is not None:
            self._check_attachment(media, self.allowed_image_types, "media")
        if voice_note is not None:
            self._check_attachment(voice_note, self.allowed_audio_types, "voice_note")
        return issue_type

    def _check_attachment(self, attachment: MediaAttachment, allowed: List[str], field_name: str) -> None:
        if attachment.content_type not in allowed:
            raise ValidationFailed(
                f"File type {attachment.content_type} not allowed. Allowed: {allowed}",
                fields=[field_name],
            )
        if not attachment.data:
            raise ValidationFailed("Uploaded file is empty", fields=[field_name])
        if len(attachment.data) > self.max_upload_size:
            raise ValidationFailed(
                f"File too large. Maximum size: {self.max_upload_size / (1024 * 1024):.1f}MB",
                fields=[field_name],
            )

    async def _upload(self, attachment: MediaAttachment) -> str:
        name = build_blob_name(attachment.filename, self.media_folder)
        try:
            return await self.blob_store.put(name, attachment.data, attachment.content_type)
        except MediaUploadFailed:
            raise
        except Exception as e:
            logger.exception("Media upload failed for %s", name)
            raise MediaUploadFailed(f"Failed to upload media: {e}") from e

    async def submit(
        self,
        form: ComplaintForm,
        media: Optional[MediaAttachment] = None,
        voice_note: Optional[MediaAttachment] = None,
    ) -> ComplaintReceipt:
        """
        Submit a complaint.

        Raises:
            ValidationFailed: missing field or bad attachment, nothing written
            MediaUploadFailed: blob upload failed, nothing written
            PersistenceFailed: complaint insert failed
        """
        issue_type = self.validate(form, media, voice_note)

        # 1. Media is durable before any row points at it
        media_url = await self._upload(media) if media is not None else None
        voice_note_url = await self._upload(voice_note) if voice_note is not None else None

        # 2. Insert; the store owns the complaint code
        try:
            complaint = await self.store.insert(
                state=_clean(form.state),
                city=_clean(form.city),
                district=_clean(form.district),
                address_line1=_clean(form.address_line1),
                address_line2=_clean(form.address_line2),
                issue_type=issue_type,
                description=form.description.strip(),
                media_url=media_url,
                voice_note_url=voice_note_url,
            )
        except (PersistenceFailed, ValidationFailed):
            raise
        except Exception as e:
            logger.exception("Complaint insert failed")
            raise PersistenceFailed(f"Could not store complaint: {e}") from e

        logger.info("Complaint %s stored (issue_type=%s)", complaint.complaint_code, issue_type.value)

        receipt = ComplaintReceipt(
            complaint_id=complaint.id,
            complaint_code=complaint.complaint_code,
            status=ComplaintStatus.PENDING,
            media_url=media_url,
            voice_note_url=voice_note_url,
        )

        # 3. Routing and 4. notifications, best effort: the complaint already exists
        try:
            if self.auto_routing:
                await self._route(complaint, issue_type, receipt)
        except RoutingDegraded as e:
            logger.warning("%s", e.message)
            receipt.degraded = True

        try:
            self._arm_notifications(complaint, issue_type)
        except RoutingDegraded as e:
            logger.warning("%s", e.message)
            receipt.degraded = True

        return receipt

    async def _route(
        self, complaint: Complaint, issue_type: IssueType, receipt: ComplaintReceipt
    ) -> None:
        authority = routing_resolver.resolve(issue_type)
        if authority is None:
            logger.info("No authority for issue_type=%s; complaint %s left for manual triage",
                        issue_type.value, complaint.complaint_code)
            return

        try:
            await self.store.transition(
                complaint.id,
                ComplaintStatus.ASSIGNED,
                note=routing_resolver.routing_note(issue_type),
                assigned_to=authority,
            )
        except Exception as e:
            raise RoutingDegraded(
                f"Complaint {complaint.complaint_code} stored but not routed: {e}"
            ) from e

        receipt.status = ComplaintStatus.ASSIGNED
        receipt.assigned_to = authority
        receipt.routed = True
        logger.info("Complaint %s routed to %s", complaint.complaint_code, authority)

    def _arm_notifications(self, complaint: Complaint, issue_type: IssueType) -> None:
        try:
            self.scheduler.arm(complaint.id, complaint.complaint_code, issue_type)
        except Exception as e:
            logger.exception("Could not arm notifications for complaint %s", complaint.complaint_code)
            raise RoutingDegraded(
                f"Complaint {complaint.complaint_code} stored but notifications not scheduled: {e}"
            ) from e

    async def submit_draft(self, draft: "ComplaintDraft") -> ComplaintReceipt:
        """Submit a draft built up through media analysis"""
        return await self.submit(draft.form, media=draft.media, voice_note=draft.voice_note)
