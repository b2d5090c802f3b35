"""알림 라우터.

In-app notification inbox of the signed-in user.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.api.deps import get_current_user
from gearguard.database import get_db
from gearguard.models.user import User
from gearguard.schemas.common import PaginatedResponse
from gearguard.schemas.notification import MarkAllReadResponse, NotificationResponse, UnreadCountResponse
from gearguard.services.notification_service import notification_service
from gearguard.utils.pagination import page_envelope

router: APIRouter = APIRouter()

CurrentUser = Annotated[User, Depends(get_current_user)]
Session = Annotated[AsyncSession, Depends(get_db)]


@router.get("", response_model=PaginatedResponse)
async def list_notifications(
    db: Session,
    current_user: CurrentUser,
    unread_only: bool = False,
    request_id: UUID | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    """내 알림 목록 (최신순).

    Query:
        unread_only: 읽지 않은 알림만 (Only unread notifications)
        request_id: 특정 정비 요청 관련 알림만 (Only those about one request)
    """
    notifications, total = await notification_service.list_notifications(
        db,
        current_user.id,
        unread_only=unread_only,
        request_id=request_id,
        page=page,
        per_page=per_page,
    )
    return page_envelope([notification_service.build_response(n) for n in notifications], total, page, per_page)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(db: Session, current_user: CurrentUser) -> dict:
    return {"unread_count": await notification_service.get_unread_count(db, current_user.id)}


@router.patch("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    db: Session,
    current_user: CurrentUser,
    request_id: UUID | None = None,
) -> dict:
    """읽지 않은 알림 일괄 읽음 처리.

    With ``request_id`` only notifications about that request are marked.
    """
    updated: int = await notification_service.mark_all_read(db, current_user.id, request_id)
    await db.commit()
    return {"updated": updated, "message": f"Marked {updated} notifications as read"}


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: UUID, db: Session, current_user: CurrentUser) -> dict:
    notification = await notification_service.mark_read(db, notification_id, current_user.id)
    await db.commit()
    return notification_service.build_response(notification)
