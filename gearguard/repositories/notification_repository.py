"""알림 레포지토리.

Notification queries. Every query is scoped to one recipient; listing and
bulk read markers can be narrowed to unread rows or to a single
maintenance request.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import ColumnElement, Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.notification import Notification
from gearguard.repositories.base import BaseRepository

REQUEST_REFERENCE = "maintenance_request"


def _recipient_filter(
    user_id: UUID,
    unread_only: bool = False,
    request_id: UUID | None = None,
) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = [Notification.user_id == user_id]
    if unread_only:
        conditions.append(Notification.is_read.is_(False))
    if request_id is not None:
        conditions.append(Notification.reference_type == REQUEST_REFERENCE)
        conditions.append(Notification.reference_id == request_id)
    return conditions


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self) -> None:
        super().__init__(Notification)

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        unread_only: bool = False,
        request_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Notification], int]:
        """수신자 알림 목록 (최신순).

        Recipient's notifications, newest first, optionally only unread ones
        or only those about one maintenance request.
        """
        query: Select = (
            select(Notification)
            .where(*_recipient_filter(user_id, unread_only, request_id))
            .order_by(Notification.created_at.desc(), Notification.id)
        )
        return await self.get_paginated(db, query, page, per_page)

    async def count_unread(self, db: AsyncSession, user_id: UUID) -> int:
        total = await db.scalar(
            select(func.count(Notification.id)).where(*_recipient_filter(user_id, unread_only=True))
        )
        return total or 0

    async def mark_read_bulk(self, db: AsyncSession, user_id: UUID, request_id: UUID | None = None) -> int:
        """읽지 않은 알림 일괄 읽음 처리, 처리 건수 반환.

        Flag the recipient's unread notifications as read and return how many
        rows changed. ``request_id`` limits the update to one request.
        """
        result = await db.execute(
            update(Notification)
            .where(*_recipient_filter(user_id, unread_only=True, request_id=request_id))
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0


notification_repository: NotificationRepository = NotificationRepository()
