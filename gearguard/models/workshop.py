"""작업장 SQLAlchemy ORM 모델 정의.

Workshop SQLAlchemy ORM model definition.

Tables:
    - workshops: 작업장 (Physical workshops/sites that own equipment and teams)
"""

import uuid
from datetime import datetime
from sqlalchemy import String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from gearguard.database import Base
from gearguard.models.types import JSONType, UTCDateTime, utcnow


class Workshop(Base):
    """작업장 모델 (설비와 팀이 소속되는 사업장).

    Workshop model (Site that equipment, teams and users belong to).

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 작업장 이름 (Workshop name)
        code: 작업장 코드 (Unique upper-case code, max 10 chars)
        description: 설명 (Free-text description)
        location: 주소 정보 (address, city, state, zip_code, country)
        status: 상태 (Active | Inactive | Maintenance)
        specializations: 전문 분야 목록 (Specialization tags)
        created_by: 생성자 ID (Creator user id, no FK to avoid a users/workshops cycle)
    """

    __tablename__ = "workshops"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # 작업장 코드: 전역 고유, 대문자 (Globally unique, upper-case)
    code: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="Active", nullable=False)
    specializations: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)
