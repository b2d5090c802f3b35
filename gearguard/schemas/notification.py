"""알림 응답 스키마.

Notification payloads returned by the notifications API.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    """알림 한 건.

    ``request_id`` is set when the notification is about a maintenance
    request; ``reference_type`` and ``reference_id`` carry the raw link.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: str
    message: str
    reference_type: str | None = None
    reference_id: UUID | None = None
    request_id: UUID | None = None
    is_read: bool
    created_at: datetime


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkAllReadResponse(BaseModel):
    """일괄 읽음 처리 결과 (Bulk read result)."""

    updated: int
    message: str
