"""사용자 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definition.
A single table holds admins, technicians and employees; technician
capabilities (skills, workload) live on the same row.

Tables:
    - users: 사용자 계정 (User accounts)
"""

import uuid
from datetime import datetime
from sqlalchemy import CheckConstraint, Index, String, Integer, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from gearguard.database import Base
from gearguard.models.types import JSONType, UTCDateTime, utcnow


class User(Base):
    """사용자 모델 (시스템 사용자 계정 정보).

    User model (System user account information).

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        email: 로그인 이메일 (Login e-mail, unique, lower-cased)
        full_name: 실명 (Display name)
        password_hash: bcrypt 해시 (Bcrypt password hash)
        role: 역할 (admin | technician | employee)
        status: 계정 상태 (pending | active | inactive | suspended)
        workshop_id: 소속 작업장 FK (Home workshop)
        skills: 기술 목록 (Skill tags matched against equipment categories)
        workload: 진행 중 배정 수 (Open assignment counter, never negative)
        phone: 연락처 (Phone number)
        department: 부서 (Department)
        last_login: 마지막 로그인 (Last successful login)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # 역할 (admin | technician | employee)
    role: Mapped[str] = mapped_column(String(20), default="employee", nullable=False)
    # 계정 상태: active 이외에는 로그인 불가 (Only active accounts may log in)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)
    workshop_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("workshops.id", ondelete="SET NULL"), nullable=True)
    skills: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    workload: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_login: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("workload >= 0", name="ck_users_workload_non_negative"),
        # 자동 배정 후보 조회용 (Candidate lookup for auto-assignment)
        Index("ix_users_role_status_workload", "role", "status", "workload"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == "active"
