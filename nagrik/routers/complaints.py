from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from nagrik.core.components import Components, get_components
from nagrik.core.exceptions import (
    AnalysisFailed, ComplaintNotFound, MediaUploadFailed, PersistenceFailed, ValidationFailed
)
from nagrik.schemas.ai_outputs import MediaAnalysisResult
from nagrik.schemas.complaint import (
    ComplaintForm, ComplaintOut, ComplaintReceipt, MediaAttachment,
    StatusHistoryResponse, StatusUpdateOut,
)
from nagrik.services.media_gate import parse_issue_type

router = APIRouter(prefix="/complaints", tags=["Complaints"])

SUBMISSION_FAILED = "Submission failed. Please try again later."


def _validation_error(exc: ValidationFailed) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": exc.message, "fields": exc.fields},
    )


async def _read_attachment(upload: Optional[UploadFile]) -> Optional[MediaAttachment]:
    if upload is None or not upload.filename:
        return None
    return MediaAttachment(
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        data=await upload.read(),
    )


@router.post("/analyze-image", response_model=MediaAnalysisResult)
async def analyze_image(
    image: UploadFile = File(..., description="Photo of the issue"),
    issue_type: Optional[str] = Form(None, description="Selected issue type"),
    components: Components = Depends(get_components),
):
    """
    Check a photo against the selected issue type.

    - Relevant: returns an AI-written description to prefill the complaint text.
    - Not relevant: returns a reason and `discard_media=true`; drop the photo.
    - 503: analysis unavailable; write the description manually.
    """
    try:
        declared = parse_issue_type(issue_type)
        image_bytes = await image.read()
        return await components.gate.analyze(
            image_bytes, declared, image.content_type or "application/octet-stream"
        )
    except ValidationFailed as e:
        raise _validation_error(e)
    except AnalysisFailed:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not analyze the image. Please write a description manually.",
        )


@router.post("", response_model=ComplaintReceipt, status_code=status.HTTP_201_CREATED)
async def submit_complaint(
    state: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    district: Optional[str] = Form(None),
    address_line1: Optional[str] = Form(None),
    address_line2: Optional[str] = Form(None),
    issue_type: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    media: Optional[UploadFile] = File(None, description="Photo evidence"),
    voice_note: Optional[UploadFile] = File(None, description="Recorded voice note"),
    components: Components = Depends(get_components),
):
    """
    Register a complaint. Returns the complaint code for status lookups.

    The complaint may come back `Pending` (no matching authority, or routing
    failed with `degraded=true`) or `Assigned`.
    """
    form = ComplaintForm(
        state=state,
        city=city,
        district=district,
        address_line1=address_line1,
        address_line2=address_line2,
        issue_type=issue_type,
        description=description,
    )
    pipeline = components.pipeline

    try:
        pipeline.validate(form)
        media_attachment = await _read_attachment(media)
        voice_attachment = await _read_attachment(voice_note)
        return await pipeline.submit(form, media=media_attachment, voice_note=voice_attachment)
    except ValidationFailed as e:
        raise _validation_error(e)
    except (MediaUploadFailed, PersistenceFailed):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=SUBMISSION_FAILED,
        )


@router.get("/{complaint_code}", response_model=ComplaintOut)
async def get_complaint(
    complaint_code: str,
    components: Components = Depends(get_components),
):
    """Look up a complaint by its public code"""
    try:
        return await components.store.get_by_code(complaint_code)
    except ComplaintNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Complaint not found")


@router.get("/{complaint_code}/history", response_model=StatusHistoryResponse)
async def get_status_history(
    complaint_code: str,
    components: Components = Depends(get_components),
):
    """Status trail of a complaint, oldest first"""
    try:
        complaint = await components.store.get_by_code(complaint_code)
    except ComplaintNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Complaint not found")

    updates = await components.store.list_status_updates(complaint.id)
    return StatusHistoryResponse(
        complaint_code=complaint.complaint_code,
        current_status=complaint.status,
        history=[StatusUpdateOut.model_validate(u) for u in updates],
    )
