import uuid
import enum
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING
from sqlalchemy import String, DateTime, Text, Enum as SQLEnum, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nagrik.core.database import Base

if TYPE_CHECKING:
    from nagrik.models.notification import Notification


class IssueType(str, enum.Enum):
    """Closed set of reportable civic issues"""
    STREETLIGHT = "streetlight"
    POTHOLE = "pothole"
    GARBAGE = "garbage"
    DRAINAGE = "drainage"
    WATER = "water"
    ELECTRICITY = "electricity"
    NOISE = "noise"
    OTHERS = "others"


class ComplaintStatus(str, enum.Enum):
    """Complaint lifecycle, forward only"""
    PENDING = "Pending"
    ASSIGNED = "Assigned"
    IN_PROGRESS = "InProgress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


# Allowed single-step moves. Anything else is a regression or a skip.
STATUS_TRANSITIONS = {
    ComplaintStatus.PENDING: ComplaintStatus.ASSIGNED,
    ComplaintStatus.ASSIGNED: ComplaintStatus.IN_PROGRESS,
    ComplaintStatus.IN_PROGRESS: ComplaintStatus.RESOLVED,
    ComplaintStatus.RESOLVED: ComplaintStatus.CLOSED,
}


class Complaint(Base):
    """Citizen-reported civic issue"""
    __tablename__ = "complaints"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    complaint_code: Mapped[str] = mapped_column(
        String(20), unique=True, index=True, nullable=False
    )

    # Location
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    district: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    address_line1: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address_line2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    issue_type: Mapped[IssueType] = mapped_column(SQLEnum(IssueType), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Evidence
    media_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    voice_note_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    status: Mapped[ComplaintStatus] = mapped_column(
        SQLEnum(ComplaintStatus), default=ComplaintStatus.PENDING, index=True, nullable=False
    )
    assigned_to: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    status_updates: Mapped[List["StatusUpdate"]] = relationship(
        "StatusUpdate", back_populates="complaint", order_by="StatusUpdate.created_at"
    )
    notifications: Mapped[List["Notification"]] = relationship(
        "Notification", back_populates="complaint"
    )

    def __repr__(self) -> str:
        return f"<Complaint {self.complaint_code} - {self.status}>"


class StatusUpdate(Base):
    """Append-only audit trail of status changes"""
    __tablename__ = "complaint_status_updates"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    complaint_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("complaints.id"), nullable=False, index=True
    )

    status: Mapped[ComplaintStatus] = mapped_column(SQLEnum(ComplaintStatus), nullable=False)
    assigned_to: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    note: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, index=True
    )

    complaint: Mapped["Complaint"] = relationship("Complaint", back_populates="status_updates")

    def __repr__(self) -> str:
        return f"<StatusUpdate {self.complaint_id} -> {self.status}>"
