from typing import List, Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field

from nagrik.models.complaint import ComplaintStatus, IssueType


class ComplaintForm(BaseModel):
    """Raw intake form. Required fields are checked by the submission pipeline."""
    state: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    issue_type: Optional[str] = None
    description: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "state": "Delhi",
                "city": "Delhi",
                "district": "South Delhi",
                "address_line1": "Block C, Lajpat Nagar",
                "issue_type": "electricity",
                "description": "No power since morning"
            }
        }
    }


class MediaAttachment(BaseModel):
    """File payload handed to the pipeline for upload"""
    filename: str
    content_type: str
    data: bytes


class ComplaintReceipt(BaseModel):
    """What the caller gets back after a successful submission"""
    complaint_id: UUID
    complaint_code: str = Field(..., description="Short public identifier, e.g. NGR123456")
    status: ComplaintStatus
    assigned_to: Optional[str] = None
    routed: bool = Field(False, description="Complaint was auto-assigned to an authority")
    degraded: bool = Field(False, description="Stored, but automatic routing failed")
    media_url: Optional[str] = None
    voice_note_url: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "complaint_id": "8d0f1c9e-3c2b-4a57-9f0e-1b2c3d4e5f60",
                "complaint_code": "NGR482913",
                "status": "Assigned",
                "assigned_to": "Electricity Department",
                "routed": True,
                "degraded": False,
                "media_url": None,
                "voice_note_url": None
            }
        }
    }


class ComplaintOut(BaseModel):
    id: UUID
    complaint_code: str
    state: str
    city: str
    district: Optional[str]
    address_line1: Optional[str]
    address_line2: Optional[str]
    issue_type: IssueType
    description: str
    media_url: Optional[str]
    voice_note_url: Optional[str]
    status: ComplaintStatus
    assigned_to: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class StatusUpdateOut(BaseModel):
    status: ComplaintStatus
    assigned_to: Optional[str]
    note: str
    created_at: datetime

    model_config = {"from_attributes": True}


class StatusHistoryResponse(BaseModel):
    complaint_code: str
    current_status: ComplaintStatus
    history: List[StatusUpdateOut]
