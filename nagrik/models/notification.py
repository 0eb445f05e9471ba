import uuid
import enum
from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import String, Integer, Boolean, DateTime, Text, Enum as SQLEnum, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nagrik.core.database import Base

if TYPE_CHECKING:
    from nagrik.models.complaint import Complaint


class NotificationStage(str, enum.Enum):
    """Lifecycle stages, in emission order"""
    CONFIRMATION = "confirmation"
    ACKNOWLEDGEMENT = "acknowledgement"
    RESOLUTION = "resolution"

    @property
    def sequence(self) -> int:
        return STAGE_ORDER.index(self) + 1


STAGE_ORDER = [
    NotificationStage.CONFIRMATION,
    NotificationStage.ACKNOWLEDGEMENT,
    NotificationStage.RESOLUTION,
]


class Notification(Base):
    """Lifecycle message for the reporter of a complaint"""
    __tablename__ = "notifications"
    __table_args__ = (
        UniqueConstraint("complaint_id", "stage", name="uq_notification_complaint_stage"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    complaint_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("complaints.id"), nullable=False, index=True
    )

    complaint_code: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True
    )

    # No identity layer yet; every reporter is anonymous
    user_id: Mapped[str] = mapped_column(
        String(100), default="anonymous", nullable=False, index=True
    )

    stage: Mapped[NotificationStage] = mapped_column(
        SQLEnum(NotificationStage), nullable=False
    )

    # Tie-breaker when two stages share a timestamp
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    message: Mapped[str] = mapped_column(Text, nullable=False)

    is_read: Mapped[bool] = mapped_column(
        Boolean, default=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, index=True
    )

    complaint: Mapped["Complaint"] = relationship("Complaint", back_populates="notifications")

    def __repr__(self) -> str:
        return f"<Notification {self.stage} for {self.complaint_code}>"
