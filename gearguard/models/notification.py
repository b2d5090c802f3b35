"""알림 관련 SQLAlchemy ORM 모델 정의.

Notification SQLAlchemy ORM model definitions.
Each notification references its source entity via reference_type and
reference_id.

Tables:
    - notifications: 사용자 알림 (In-app user notifications)
"""

import uuid
from datetime import datetime
from sqlalchemy import Boolean, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from gearguard.database import Base
from gearguard.models.types import UTCDateTime, utcnow


class Notification(Base):
    """알림 모델 (사용자에게 전달되는 시스템 알림).

    Notification Types (type 필드 값):
        - "request_assigned": 정비 요청 배정 (Maintenance request assigned)
        - "request_status": 상태 변경 (Request status changed, sent to creator)

    Reference Types (reference_type 필드 값):
        - "maintenance_request": MaintenanceRequest 참조
    """

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[str] = mapped_column(String(1000), nullable=False)
    reference_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    reference_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
