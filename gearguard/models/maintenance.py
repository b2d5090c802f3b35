"""정비 요청 관련 SQLAlchemy ORM 모델 정의.

Maintenance request SQLAlchemy ORM model definitions.
Work notes and parts are separate append-only tables so concurrent
appends never overwrite each other.

Tables:
    - maintenance_requests: 정비 요청 (Maintenance requests)
    - work_notes: 작업 기록 (Append-only labor ledger)
    - parts_used: 사용 부품 (Append-only parts ledger)
    - request_number_sequences: 월별 요청 번호 카운터 (Per-month numbering counter)
"""

import uuid
from datetime import datetime
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gearguard.database import Base
from gearguard.models.types import JSONType, UTCDateTime, utcnow


class MaintenanceRequest(Base):
    """정비 요청 모델 (정비 작업의 전체 수명 주기).

    Maintenance request model (The full lifecycle of a maintenance job).

    Status flow:
        New → Assigned → In Progress ⇄ Waiting for Parts / On Hold → Completed
        Cancelled, Rejected 는 종료 상태 (Terminal statuses)

    Attributes:
        request_number: 요청 번호 (MR-YYYYMM-NNNN, unique, immutable)
        equipment_id: 대상 설비 FK (Equipment being serviced)
        created_by: 요청자 FK (Creator, immutable)
        assigned_technician_id: 담당 기술자 FK (Assigned technician)
        assigned_team_id: 담당 팀 FK (Assigned team)
        status: 상태 (New | Assigned | In Progress | Waiting for Parts | On Hold | Completed | Cancelled | Rejected)
        due_date: 마감일 (Always set after creation)
        actual_start_date: 실제 시작 (Stamped on first In Progress)
        actual_end_date: 실제 종료 (Stamped on Completed)
        completed_at: 완료 시각 (Stamped on Completed)
        cost_labor / cost_parts / cost_external: 비용 (cost_parts mirrors the parts ledger)
        sla_response_hours / sla_resolution_hours: SLA 목표 시간 (Target hours by priority)
        response_deadline / resolution_deadline: SLA 마감 시각 (Computed deadlines)
        sla_breached: SLA 위반 여부 (Set when completed after the resolution deadline)

    Relationships:
        work_notes: 작업 기록 (Ordered by timestamp, eager-loaded)
        parts_used: 사용 부품 (Ordered by requested_at, eager-loaded)
    """

    __tablename__ = "maintenance_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 요청 번호: 전역 고유, 생성 후 불변 (Unique, immutable after creation)
    request_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), default="Corrective", nullable=False)
    category: Mapped[str] = mapped_column(String(30), default="Other", nullable=False)
    equipment_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("equipment.id"), nullable=False)
    location: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    # 분류 축: 서로 독립 (Independent classification axes)
    priority: Mapped[str] = mapped_column(String(20), default="Medium", nullable=False)
    urgency: Mapped[str] = mapped_column(String(20), default="Medium", nullable=False)
    impact: Mapped[str] = mapped_column(String(20), default="Medium", nullable=False)

    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    assigned_technician_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    assigned_team_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True)
    status: Mapped[str] = mapped_column(String(30), default="New", nullable=False)

    # 일정 (Scheduling)
    scheduled_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    estimated_duration: Mapped[float | None] = mapped_column(Float, nullable=True)
    due_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    actual_start_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    actual_end_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    # 비용 (Cost breakdown)
    cost_labor: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    cost_parts: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    cost_external: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    # SLA (Service level targets)
    sla_response_hours: Mapped[float] = mapped_column(Float, nullable=False)
    sla_resolution_hours: Mapped[float] = mapped_column(Float, nullable=False)
    response_deadline: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    resolution_deadline: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    sla_breached: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    tags: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)

    # 요청자 피드백 (Requester feedback after completion)
    feedback_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    feedback_comment: Mapped[str | None] = mapped_column(String(500), nullable=True)
    feedback_submitted_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    feedback_submitted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_mr_status", "status"),
        Index("ix_mr_equipment_id", "equipment_id"),
        Index("ix_mr_technician_status", "assigned_technician_id", "status"),
        Index("ix_mr_team_status", "assigned_team_id", "status"),
        Index("ix_mr_due_date", "due_date"),
    )

    work_notes = relationship(
        "WorkNote",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="WorkNote.timestamp",
    )
    parts_used = relationship(
        "PartUsage",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PartUsage.requested_at",
    )


class WorkNote(Base):
    """작업 기록 모델: 기술자의 작업 내역 (추가 전용).

    Work note (A technician's labor entry. Append-only).
    """

    __tablename__ = "work_notes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    request_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("maintenance_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    technician_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    note: Mapped[str] = mapped_column(String(1000), nullable=False)
    # 작업 시간: 0~24 시간 (Hours worked per entry)
    hours_worked: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    # 첨부파일 메타데이터 ([{filename, file_path, file_size, mime_type}])
    attachments: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint("hours_worked >= 0 AND hours_worked <= 24", name="ck_work_notes_hours"),
    )


class PartUsage(Base):
    """사용 부품 모델: 요청에 소모된 부품 (추가 전용).

    Part usage (Material consumed by a request. Append-only).
    """

    __tablename__ = "parts_used"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    request_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("maintenance_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    part_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_cost: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    supplier: Mapped[str | None] = mapped_column(String(200), nullable=True)
    requested_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    requested_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_parts_used_quantity"),
        CheckConstraint("unit_cost >= 0", name="ck_parts_used_unit_cost"),
    )


class RequestNumberSequence(Base):
    """월별 요청 번호 카운터.

    Per-month counter used to serialise request number allocation.

    Attributes:
        period: 연월 (YYYYMM)
        last_value: 마지막으로 발급된 순번 (Last sequence handed out)
    """

    __tablename__ = "request_number_sequences"

    period: Mapped[str] = mapped_column(String(6), primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
