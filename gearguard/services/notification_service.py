"""알림 서비스 (인앱 알림 및 이메일 발송).

Notification Service (In-app notifications and best-effort e-mail delivery).
E-mail sending is scheduled as a background task after the notification
data has been captured; delivery failures are logged and never propagate
to the operation that triggered them.
"""

import asyncio
import logging
from html import escape
from typing import Sequence
from uuid import UUID

import aiosmtplib
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.config import settings
from gearguard.models.maintenance import MaintenanceRequest
from gearguard.models.notification import Notification
from gearguard.models.user import User
from gearguard.repositories.notification_repository import REQUEST_REFERENCE, notification_repository
from gearguard.utils.email import send_email, smtp_configured
from gearguard.utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class NotificationService:
    """알림 비즈니스 로직을 처리하는 서비스.

    Service handling notification business logic.
    Keeps references to in-flight e-mail tasks so they are not garbage
    collected before completion and can be drained on shutdown.
    """

    def __init__(self) -> None:
        self._pending: set[asyncio.Task] = set()

    def build_response(self, notification: Notification) -> dict:
        is_request = notification.reference_type == REQUEST_REFERENCE
        return {
            "id": notification.id,
            "type": notification.type,
            "message": notification.message,
            "reference_type": notification.reference_type,
            "reference_id": notification.reference_id,
            "request_id": notification.reference_id if is_request else None,
            "is_read": notification.is_read,
            "created_at": notification.created_at,
        }

    async def list_notifications(
        self,
        db: AsyncSession,
        user_id: UUID,
        unread_only: bool = False,
        request_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Notification], int]:
        return await notification_repository.list_for_user(
            db, user_id, unread_only=unread_only, request_id=request_id, page=page, per_page=per_page
        )

    async def get_unread_count(self, db: AsyncSession, user_id: UUID) -> int:
        return await notification_repository.count_unread(db, user_id)

    async def mark_read(self, db: AsyncSession, notification_id: UUID, user_id: UUID) -> Notification:
        """알림을 읽음 처리합니다. 본인 알림이 아니면 404.

        Mark a notification as read. Notifications of other users are reported
        as not found.
        """
        notification = await notification_repository.get_by_id(db, notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFoundError("알림을 찾을 수 없습니다 (Notification not found)")
        notification.is_read = True
        await db.flush()
        return notification

    async def mark_all_read(self, db: AsyncSession, user_id: UUID, request_id: UUID | None = None) -> int:
        return await notification_repository.mark_read_bulk(db, user_id, request_id)

    async def notify_assignment(
        self,
        db: AsyncSession,
        technician: User,
        request: MaintenanceRequest,
        equipment_name: str | None = None,
    ) -> None:
        """배정 알림 (인앱 알림 생성 후 이메일 발송 예약).

        Notify a technician of a new assignment: an in-app notification row in
        the current unit of work, plus a fire-and-forget e-mail.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            technician: 배정된 기술자 (Assigned technician)
            request: 정비 요청 (Maintenance request)
            equipment_name: 설비 이름 (Equipment name for the e-mail body)
        """
        await notification_repository.create(
            db,
            {
                "user_id": technician.id,
                "type": "request_assigned",
                "message": f"정비 요청이 배정되었습니다: {request.request_number} {request.title}",
                "reference_type": REQUEST_REFERENCE,
                "reference_id": request.id,
            },
        )

        # 백그라운드 작업 전에 값 캡처 (Capture plain values before scheduling)
        subject = f"New Maintenance Request Assigned - {request.title}"
        link = f"{settings.FRONTEND_URL.rstrip('/')}/maintenance/{request.id}"
        due = request.due_date.strftime("%Y-%m-%d %H:%M UTC") if request.due_date else "-"
        text = (
            f"Hello {technician.full_name},\n\n"
            f"You have been assigned maintenance request {request.request_number}.\n"
            f"Title: {request.title}\n"
            f"Priority: {request.priority}\n"
            f"Equipment: {equipment_name or '-'}\n"
            f"Due: {due}\n\n"
            f"{link}\n"
        )
        html = (
            f"<p>Hello {escape(technician.full_name)},</p>"
            f"<p>You have been assigned maintenance request <strong>{escape(request.request_number)}</strong>.</p>"
            "<ul>"
            f"<li>Title: {escape(request.title)}</li>"
            f"<li>Priority: {escape(request.priority)}</li>"
            f"<li>Equipment: {escape(equipment_name or '-')}</li>"
            f"<li>Due: {escape(due)}</li>"
            "</ul>"
            f'<p><a href="{escape(link)}">View request</a></p>'
        )
        self.dispatch_email(technician.email, subject, html, text)

    async def notify_status_change(
        self,
        db: AsyncSession,
        request: MaintenanceRequest,
        actor_id: UUID,
    ) -> None:
        """상태 변경 시 요청자에게 인앱 알림 (In-app notice to the creator)."""
        if request.created_by == actor_id:
            return
        await notification_repository.create(
            db,
            {
                "user_id": request.created_by,
                "type": "request_status",
                "message": f"{request.request_number} 상태 변경: {request.status}",
                "reference_type": REQUEST_REFERENCE,
                "reference_id": request.id,
            },
        )

    def dispatch_email(self, to: str, subject: str, html: str, text: str | None = None) -> None:
        """이메일 발송을 백그라운드로 예약합니다 (결과를 기다리지 않음).

        Schedule an e-mail in the background without awaiting it.
        """
        if not smtp_configured():
            logger.info("SMTP not configured, skipping e-mail to %s: %s", to, subject)
            return
        task = asyncio.create_task(self._send_safely(to, subject, html, text))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send_safely(self, to: str, subject: str, html: str, text: str | None) -> None:
        try:
            await send_email(to, subject, html, text)
            logger.info("Sent e-mail to %s: %s", to, subject)
        except aiosmtplib.SMTPException:
            logger.exception("SMTP rejected e-mail to %s: %s", to, subject)
        except Exception:
            logger.exception("Failed to send e-mail to %s: %s", to, subject)

    async def drain(self) -> None:
        """진행 중인 이메일 작업 완료 대기 (Wait for in-flight e-mail tasks)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


notification_service: NotificationService = NotificationService()
