"""속도 제한 기록 모델.

Rate limit hit SQLAlchemy ORM model.
Stored in the database so every server process shares the same window.

Tables:
    - rate_limit_hits: 민감 작업 실행 기록 (Sensitive operation hits)
"""

import uuid
from datetime import datetime
from sqlalchemy import Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from gearguard.database import Base
from gearguard.models.types import UTCDateTime, utcnow


class RateLimitHit(Base):
    __tablename__ = "rate_limit_hits"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 제한 키 ("{action}:{user_id}")
    key: Mapped[str] = mapped_column(String(200), nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_rate_limit_hits_key_time", "key", "occurred_at"),
    )
