"""
In-app notification endpoints.
"""

from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, status, Query

from nagrik.core.components import Components, get_components
from nagrik.schemas.notification import NotificationList, NotificationResponse


router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationList)
async def list_notifications(
    user_id: Optional[str] = Query(None, description="Reporter handle"),
    complaint_code: Optional[str] = Query(None, description="Only this complaint"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False),
    components: Components = Depends(get_components),
):
    """
    List notifications with pagination.

    - **user_id** / **complaint_code**: filter by reporter or by complaint
    - **unread_only**: If true, only return unread notifications

    Complaint feeds read oldest first (stage order); user feeds newest first.
    """
    if user_id is None and complaint_code is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide user_id or complaint_code"
        )

    items, total, unread_count = await components.store.list_notifications(
        user_id=user_id,
        complaint_code=complaint_code,
        unread_only=unread_only,
        skip=skip,
        limit=limit,
        newest_first=complaint_code is None,
    )

    return NotificationList(
        items=[NotificationResponse.model_validate(n) for n in items],
        total=total,
        unread_count=unread_count,
        skip=skip,
        limit=limit,
    )


@router.patch("/{notification_id}/read", status_code=status.HTTP_200_OK)
async def mark_notification_read(
    notification_id: UUID,
    components: Components = Depends(get_components),
):
    """
    Mark a single notification as read.
    """
    if not await components.store.mark_notification_read(notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )

    return {"message": "Notification marked as read"}


@router.post("/mark-all-read", status_code=status.HTTP_200_OK)
async def mark_all_notifications_read(
    user_id: str = Query("anonymous", description="Reporter handle"),
    components: Components = Depends(get_components),
):
    """
    Mark all of a reporter's notifications as read.
    """
    count = await components.store.mark_all_notifications_read(user_id)

    return {
        "message": f"Marked {count} notifications as read",
        "count": count
    }
