"""
Durable store for complaints, their status trail, and lifecycle notifications.

Every public method runs in its own short transaction. Status changes are
conditional updates keyed on the expected current status, so concurrent
writers can never move a complaint backwards or skip a step.
"""

import logging
import secrets
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update, func, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from nagrik.core.config import settings
from nagrik.core.exceptions import (
    ComplaintNotFound, InvalidStatusTransition, PersistenceFailed, ValidationFailed
)
from nagrik.models.complaint import (
    Complaint, StatusUpdate, ComplaintStatus, IssueType, STATUS_TRANSITIONS
)
from nagrik.models.notification import Notification, NotificationStage

logger = logging.getLogger(__name__)


def _is_code_collision(error: IntegrityError) -> bool:
    """True only for a unique violation on complaints.complaint_code"""
    text = str(error.orig).lower()
    return "complaint_code" in text and ("unique" in text or "duplicate" in text)


class ComplaintStore:
    """Persistence for the intake pipeline, backed by async SQLAlchemy"""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        code_prefix: Optional[str] = None,
        code_attempts: Optional[int] = None,
    ):
        self._session_factory = session_factory
        self.code_prefix = code_prefix or settings.COMPLAINT_CODE_PREFIX
        self.code_attempts = code_attempts or settings.COMPLAINT_CODE_ATTEMPTS

    def _generate_code(self) -> str:
        return f"{self.code_prefix}{secrets.randbelow(1_000_000):06d}"

    # ------------------------------------------------------------------
    # Complaints
    # ------------------------------------------------------------------

    async def insert(
        self,
        *,
        state: str,
        city: str,
        issue_type: IssueType,
        description: str,
        district: Optional[str] = None,
        address_line1: Optional[str] = None,
        address_line2: Optional[str] = None,
        media_url: Optional[str] = None,
        voice_note_url: Optional[str] = None,
    ) -> Complaint:
        """
        Insert a new Pending complaint and assign its public code.

        The code is drawn here and only here. A collision on the unique
        index is retried with a fresh code.

        Raises:
            ValidationFailed: description is empty
            PersistenceFailed: database error, or no free code after all attempts
        """
        if not description or not description.strip():
            raise ValidationFailed("Description must not be empty", fields=["description"])

        last_error: Optional[Exception] = None
        for attempt in range(1, self.code_attempts + 1):
            complaint = Complaint(
                complaint_code=self._generate_code(),
                state=state,
                city=city,
                district=district,
                address_line1=address_line1,
                address_line2=address_line2,
                issue_type=issue_type,
                description=description,
                media_url=media_url,
                voice_note_url=voice_note_url,
                status=ComplaintStatus.PENDING,
            )
            try:
                async with self._session_factory() as session:
                    async with session.begin():
                        session.add(complaint)
                return complaint
            except IntegrityError as e:
                if not _is_code_collision(e):
                    logger.exception("Failed to insert complaint")
                    raise PersistenceFailed(f"Could not store complaint: {e}") from e
                last_error = e
                logger.warning("Complaint code collision on attempt %d: %s",
                               attempt, complaint.complaint_code)
            except SQLAlchemyError as e:
                logger.exception("Failed to insert complaint")
                raise PersistenceFailed(f"Could not store complaint: {e}") from e

        raise PersistenceFailed(
            f"Could not allocate a unique complaint code after {self.code_attempts} attempts"
        ) from last_error

    async def get_by_id(self, complaint_id: UUID) -> Complaint:
        async with self._session_factory() as session:
            complaint = await session.get(Complaint, complaint_id)
        if complaint is None:
            raise ComplaintNotFound(f"Complaint {complaint_id} not found")
        return complaint

    async def get_by_code(self, complaint_code: str) -> Complaint:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Complaint).where(Complaint.complaint_code == complaint_code.strip().upper())
            )
            complaint = result.scalar_one_or_none()
        if complaint is None:
            raise ComplaintNotFound(f"Complaint {complaint_code} not found")
        return complaint

    async def count_complaints(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(select(func.count(Complaint.id)))
            return result.scalar() or 0

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @staticmethod
    async def _update_status(
        session: AsyncSession,
        complaint_id: UUID,
        status: ComplaintStatus,
        assigned_to: Optional[str],
    ) -> ComplaintStatus:
        current = await session.scalar(
            select(Complaint.status).where(Complaint.id == complaint_id)
        )
        if current is None:
            raise ComplaintNotFound(f"Complaint {complaint_id} not found")
        if STATUS_TRANSITIONS.get(current) != status:
            raise InvalidStatusTransition(
                f"Cannot move complaint from {current.value} to {status.value}"
            )

        values = {"status": status, "updated_at": datetime.utcnow()}
        if assigned_to is not None:
            values["assigned_to"] = assigned_to

        # Conditional on the status we just read; a concurrent writer wins the race
        result = await session.execute(
            update(Complaint)
            .where(and_(Complaint.id == complaint_id, Complaint.status == current))
            .values(**values)
        )
        if result.rowcount != 1:
            raise InvalidStatusTransition(
                f"Complaint {complaint_id} changed status concurrently"
            )
        return current

    @staticmethod
    def _status_row(
        complaint_id: UUID, status: ComplaintStatus, assigned_to: Optional[str], note: str
    ) -> StatusUpdate:
        return StatusUpdate(
            complaint_id=complaint_id,
            status=status,
            assigned_to=assigned_to,
            note=note,
            created_at=datetime.utcnow(),
        )

    async def update_status(
        self, complaint_id: UUID, status: ComplaintStatus, assigned_to: Optional[str] = None
    ) -> None:
        """Advance the complaint one step; the audit row is written in the same transaction"""
        await self.transition(
            complaint_id, status, note=f"Status changed to {status.value}", assigned_to=assigned_to
        )

    async def append_status(
        self,
        complaint_id: UUID,
        status: ComplaintStatus,
        note: str,
        assigned_to: Optional[str] = None,
    ) -> StatusUpdate:
        """
        Record the complaint's current status in the audit trail, once.

        Rows are never updated or deleted. Use transition() to change the status.

        Raises:
            ComplaintNotFound: unknown complaint
            InvalidStatusTransition: status is not the current one, or is already recorded
        """
        row = self._status_row(complaint_id, status, assigned_to, note)
        async with self._session_factory() as session:
            async with session.begin():
                current = await session.scalar(
                    select(Complaint.status).where(Complaint.id == complaint_id)
                )
                if current is None:
                    raise ComplaintNotFound(f"Complaint {complaint_id} not found")
                if current != status:
                    raise InvalidStatusTransition(
                        f"Complaint is {current.value}; cannot record {status.value}"
                    )
                last_recorded = await session.scalar(
                    select(StatusUpdate.status)
                    .where(StatusUpdate.complaint_id == complaint_id)
                    .order_by(StatusUpdate.created_at.desc())
                    .limit(1)
                )
                if last_recorded == status:
                    raise InvalidStatusTransition(f"{status.value} is already recorded")
                session.add(row)
        return row

    async def transition(
        self,
        complaint_id: UUID,
        status: ComplaintStatus,
        note: str,
        assigned_to: Optional[str] = None,
    ) -> StatusUpdate:
        """
        Advance the status and append the matching audit row atomically.

        Raises:
            ComplaintNotFound: unknown complaint
            InvalidStatusTransition: not the next status, or lost a concurrent race
        """
        row = self._status_row(complaint_id, status, assigned_to, note)
        async with self._session_factory() as session:
            async with session.begin():
                previous = await self._update_status(session, complaint_id, status, assigned_to)
                session.add(row)
        logger.info("Complaint %s moved %s -> %s", complaint_id, previous.value, status.value)
        return row

    async def list_status_updates(self, complaint_id: UUID) -> List[StatusUpdate]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(StatusUpdate)
                .where(StatusUpdate.complaint_id == complaint_id)
                .order_by(StatusUpdate.created_at.asc())
            )
            return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def insert_notification(
        self,
        *,
        complaint_id: UUID,
        complaint_code: str,
        stage: NotificationStage,
        message: str,
        user_id: str = "anonymous",
    ) -> Optional[Notification]:
        """
        Persist one lifecycle notification.

        Returns None if this stage was already recorded for the complaint.
        """
        async with self._session_factory() as session:
            existing = await session.scalar(
                select(Notification.id).where(
                    and_(Notification.complaint_id == complaint_id, Notification.stage == stage)
                )
            )
            if existing is not None:
                return None

        notification = Notification(
            complaint_id=complaint_id,
            complaint_code=complaint_code,
            user_id=user_id,
            stage=stage,
            sequence=stage.sequence,
            message=message,
            is_read=False,
            created_at=datetime.utcnow(),
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(notification)
        except IntegrityError:
            return None
        return notification

    async def list_notifications(
        self,
        *,
        user_id: Optional[str] = None,
        complaint_id: Optional[UUID] = None,
        complaint_code: Optional[str] = None,
        unread_only: bool = False,
        skip: int = 0,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> Tuple[List[Notification], int, int]:
        """Return (page, total matching, unread matching the same owner filters)"""
        owner_filters = []
        if user_id is not None:
            owner_filters.append(Notification.user_id == user_id)
        if complaint_id is not None:
            owner_filters.append(Notification.complaint_id == complaint_id)
        if complaint_code is not None:
            owner_filters.append(Notification.complaint_code == complaint_code.strip().upper())

        filters = list(owner_filters)
        if unread_only:
            filters.append(Notification.is_read == False)  # noqa: E712

        if newest_first:
            ordering = (Notification.created_at.desc(), Notification.sequence.desc())
        else:
            ordering = (Notification.created_at.asc(), Notification.sequence.asc())

        async with self._session_factory() as session:
            total = await session.scalar(
                select(func.count(Notification.id)).where(*filters)
            ) or 0
            unread_count = await session.scalar(
                select(func.count(Notification.id)).where(
                    *owner_filters, Notification.is_read == False  # noqa: E712
                )
            ) or 0

            query = select(Notification).where(*filters).order_by(*ordering).offset(skip)
            if limit is not None:
                query = query.limit(limit)
            result = await session.execute(query)
            items = list(result.scalars().all())

        return items, total, unread_count

    async def mark_notification_read(self, notification_id: UUID) -> bool:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    update(Notification)
                    .where(Notification.id == notification_id)
                    .values(is_read=True)
                )
        return result.rowcount == 1

    async def mark_all_notifications_read(self, user_id: str) -> int:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    update(Notification)
                    .where(and_(Notification.user_id == user_id, Notification.is_read == False))  # noqa: E712
                    .values(is_read=True)
                )
        return result.rowcount
