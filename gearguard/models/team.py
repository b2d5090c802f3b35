"""팀 관련 SQLAlchemy ORM 모델 정의.

Team SQLAlchemy ORM model definitions.

Tables:
    - teams: 정비 팀 (Maintenance teams within a workshop)
    - team_members: 팀 구성원 (Team membership rows)
"""

import uuid
from datetime import datetime
from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gearguard.database import Base
from gearguard.models.types import JSONType, UTCDateTime, utcnow


class Team(Base):
    """팀 모델 (작업장 소속 정비 팀).

    Team model (Maintenance team belonging to a workshop).

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 팀 이름 (Team name)
        workshop_id: 소속 작업장 FK (Parent workshop)
        description: 설명 (Description)
        specialization: 전문 분야 목록 (Specialization tags)
        team_lead_id: 팀장 FK (Team lead user)
        status: 상태 (Active | Inactive)
        max_capacity: 최대 인원 (Maximum active members)

    Relationships:
        members: 팀 구성원 목록 (Membership rows, eager-loaded)
    """

    __tablename__ = "teams"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    workshop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    specialization: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    team_lead_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="Active", nullable=False)
    max_capacity: Mapped[int] = mapped_column(Integer, default=10, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    members = relationship(
        "TeamMember",
        back_populates="team",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="TeamMember.joined_at",
    )


class TeamMember(Base):
    """팀 구성원 모델 (사용자와 팀의 연결).

    Team membership row linking a user to a team with a member role.
    """

    __tablename__ = "team_members"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    team_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 구성원 역할 (lead | senior | junior | trainee)
    member_role: Mapped[str] = mapped_column(String(20), default="junior", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_member"),
    )

    team = relationship("Team", back_populates="members")
