"""설비 SQLAlchemy ORM 모델 정의.

Equipment SQLAlchemy ORM model definition.
Maintenance history is not stored here; it is queried from
maintenance_requests by equipment_id.

Tables:
    - equipment: 설비 (Serviceable equipment)
"""

import uuid
from datetime import date, datetime
from sqlalchemy import Boolean, Date, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from gearguard.database import Base
from gearguard.models.types import JSONType, UTCDateTime, utcnow


class Equipment(Base):
    """설비 모델 (정비 대상 장비).

    Equipment model (A serviceable asset owned by a workshop and)
    maintained by an assigned team.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 설비 이름 (Equipment name)
        serial_number: 시리얼 번호 (Unique serial number)
        workshop_id: 소속 작업장 FK (Owning workshop)
        category: 설비 분류 (Equipment category, matched against technician skills)
        location: 위치 (building, floor, room, zone)
        assigned_team_id: 담당 팀 FK (Responsible team, required)
        primary_technician_id: 주 담당 기술자 FK (Primary technician)
        status: 상태 (Active | Maintenance | Out of Service | Scrapped)
        criticality: 중요도 (Low | Medium | High | Critical)
        is_active: 사용 여부 (Soft-delete flag)
    """

    __tablename__ = "equipment"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    serial_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    workshop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    manufacturer: Mapped[str | None] = mapped_column(String(100), nullable=True)
    model: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[dict] = mapped_column(JSONType, nullable=False)
    assigned_team_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("teams.id"), nullable=False)
    primary_technician_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    status: Mapped[str] = mapped_column(String(30), default="Active", nullable=False)
    criticality: Mapped[str] = mapped_column(String(20), default="Medium", nullable=False)
    purchase_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    warranty_expiry: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)
