"""사용자 레포지토리 (사용자/기술자 디렉터리 쿼리 담당).

User Repository: User and technician directory queries,
including atomic workload counter updates.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.team import Team, TeamMember
from gearguard.models.user import User
from gearguard.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 레포지토리.

    Extends:
        BaseRepository[User]
    """

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        """이메일로 사용자를 조회합니다 (대소문자 무시).

        Look up a user by e-mail. E-mails are stored lower-cased.
        """
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def list_users(
        self,
        db: AsyncSession,
        role: str | None = None,
        status: str | None = None,
        workshop_id: UUID | None = None,
        search: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[User], int]:
        """필터 조건으로 사용자 목록을 조회합니다.

        List users filtered by role, status, workshop and a name/e-mail search.

        Returns:
            tuple[Sequence[User], int]: (사용자 목록, 전체 개수)
        """
        query: Select = select(User)
        if role is not None:
            query = query.where(User.role == role)
        if status is not None:
            query = query.where(User.status == status)
        if workshop_id is not None:
            query = query.where(User.workshop_id == workshop_id)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(User.full_name.ilike(pattern), User.email.ilike(pattern)))
        query = query.order_by(User.full_name, User.id)
        return await self.get_paginated(db, query, page, per_page)

    async def find_available_technicians(
        self,
        db: AsyncSession,
        skill: str | None = None,
        team_id: UUID | None = None,
    ) -> list[User]:
        """배정 가능한 기술자를 작업량 오름차순으로 조회합니다.

        Return active technicians ordered by ascending workload.
        Ties are broken by full_name then id so the order is stable.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            skill: 필요한 기술 (Required skill, matched case-insensitively)
            team_id: 팀 제한 (Restrict to active members or the lead of a team)

        Returns:
            list[User]: 기술자 목록 (Ordered technician list)
        """
        query: Select = select(User).where(User.role == "technician", User.status == "active")
        if team_id is not None:
            member_ids = select(TeamMember.user_id).where(
                TeamMember.team_id == team_id, TeamMember.is_active == True  # noqa: E712
            )
            lead_ids = select(Team.team_lead_id).where(Team.id == team_id)
            query = query.where(or_(User.id.in_(member_ids), User.id.in_(lead_ids)))
        query = query.order_by(User.workload, User.full_name, User.id)

        technicians: Sequence[User] = (await db.execute(query)).scalars().all()
        if skill is None:
            return list(technicians)

        # skills는 JSON 배열이라 방언 독립적으로 파이썬에서 필터링
        # skills is a JSON array, filtered in Python to stay dialect independent
        wanted: str = skill.casefold()
        return [t for t in technicians if wanted in {s.casefold() for s in (t.skills or [])}]

    async def list_technicians_by_workload(
        self,
        db: AsyncSession,
        team_ids: list[UUID] | None = None,
    ) -> Sequence[User]:
        """활성 기술자를 작업량 내림차순으로 조회합니다.

        Active technicians, busiest first. ``team_ids`` restricts the list to
        active members and leads of those teams.
        """
        query: Select = select(User).where(User.role == "technician", User.status == "active")
        if team_ids is not None:
            member_ids = select(TeamMember.user_id).where(
                TeamMember.team_id.in_(team_ids), TeamMember.is_active == True  # noqa: E712
            )
            lead_ids = select(Team.team_lead_id).where(Team.id.in_(team_ids))
            query = query.where(or_(User.id.in_(member_ids), User.id.in_(lead_ids)))
        query = query.order_by(User.workload.desc(), User.full_name, User.id)
        return (await db.execute(query)).scalars().all()

    async def count_overloaded(self, db: AsyncSession, threshold: int) -> int:
        total = await db.scalar(
            select(func.count(User.id)).where(
                User.role == "technician", User.status == "active", User.workload > threshold
            )
        )
        return total or 0

    async def get_led_team_ids(self, db: AsyncSession, user_id: UUID) -> list[UUID]:
        rows = await db.execute(select(Team.id).where(Team.team_lead_id == user_id).order_by(Team.name))
        return list(rows.scalars().all())

    async def increment_workload(self, db: AsyncSession, user_id: UUID, delta: int = 1) -> None:
        """작업량을 원자적으로 증가시킵니다 (Atomic workload increment)."""
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(workload=User.workload + delta)
            .execution_options(synchronize_session="fetch")
        )

    async def decrement_workload(self, db: AsyncSession, user_id: UUID, delta: int = 1) -> None:
        """작업량을 원자적으로 감소시킵니다 (0 미만 불가).

        Atomic workload decrement floored at zero.
        """
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(workload=case((User.workload > delta, User.workload - delta), else_=0))
            .execution_options(synchronize_session="fetch")
        )

    async def get_team_ids(self, db: AsyncSession, user_id: UUID) -> list[UUID]:
        """사용자가 소속되거나 이끄는 팀 ID 목록.

        Team ids the user is an active member of, or leads.
        """
        member_q = select(TeamMember.team_id).where(
            TeamMember.user_id == user_id, TeamMember.is_active == True  # noqa: E712
        )
        lead_q = select(Team.id).where(Team.team_lead_id == user_id)
        ids: set[UUID] = set((await db.execute(member_q)).scalars().all())
        ids.update((await db.execute(lead_q)).scalars().all())
        return sorted(ids, key=str)

    async def is_team_lead(self, db: AsyncSession, user_id: UUID) -> bool:
        """사용자가 팀장인 팀이 하나라도 있는지 확인합니다."""
        return await self._exists_query(
            db,
            select(Team.id).where(Team.team_lead_id == user_id).limit(1),
        )

    async def _exists_query(self, db: AsyncSession, query: Select) -> bool:
        return (await db.execute(query)).first() is not None


user_repository: UserRepository = UserRepository()
