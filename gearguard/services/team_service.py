"""팀 서비스 (팀 CRUD 및 구성원 관리 비즈니스 로직).

Team Service (Business logic for teams and team membership).
The team lead is always kept as an active "lead" member.
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.team import Team, TeamMember
from gearguard.models.user import User
from gearguard.repositories.team_repository import team_repository
from gearguard.repositories.user_repository import user_repository
from gearguard.repositories.workshop_repository import workshop_repository
from gearguard.schemas.team import TeamCreate, TeamMemberAdd, TeamUpdate
from gearguard.utils.exceptions import BadRequestError, DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


class TeamService:
    """팀 관련 비즈니스 로직을 처리하는 서비스."""

    async def build_response(self, db: AsyncSession, team: Team) -> dict:
        """팀 응답 (구성원 이름을 함께 반환합니다)."""
        member_ids = [m.user_id for m in team.members]
        names: dict[UUID, str] = {}
        if member_ids:
            rows = await db.execute(select(User.id, User.full_name).where(User.id.in_(member_ids)))
            names = {row[0]: row[1] for row in rows.all()}

        return {
            "id": str(team.id),
            "name": team.name,
            "workshop_id": str(team.workshop_id),
            "description": team.description,
            "specialization": list(team.specialization or []),
            "team_lead_id": str(team.team_lead_id) if team.team_lead_id else None,
            "status": team.status,
            "max_capacity": team.max_capacity,
            "active_members_count": sum(1 for m in team.members if m.is_active),
            "members": [
                {
                    "user_id": str(m.user_id),
                    "full_name": names.get(m.user_id),
                    "member_role": m.member_role,
                    "is_active": m.is_active,
                    "joined_at": m.joined_at,
                }
                for m in team.members
            ],
            "created_at": team.created_at,
            "updated_at": team.updated_at,
        }

    async def list_teams(
        self,
        db: AsyncSession,
        workshop_id: UUID | None = None,
        status: str | None = None,
    ) -> Sequence[Team]:
        return await team_repository.list_teams(db, workshop_id=workshop_id, status=status)

    async def get_team(self, db: AsyncSession, team_id: UUID) -> Team:
        team = await team_repository.get_by_id(db, team_id)
        if team is None:
            raise NotFoundError("팀을 찾을 수 없습니다 (Team not found)")
        return team

    async def _ensure_lead(self, db: AsyncSession, user_id: UUID) -> User:
        lead = await user_repository.get_by_id(db, user_id)
        if lead is None or lead.role not in ("technician", "admin"):
            raise BadRequestError("팀장은 기술자여야 합니다 (Team lead must be a technician)", code="INVALID_TEAM_LEAD")
        return lead

    async def create_team(self, db: AsyncSession, data: TeamCreate) -> Team:
        if await workshop_repository.get_by_id(db, data.workshop_id) is None:
            raise BadRequestError("작업장을 찾을 수 없습니다 (Workshop not found)", code="INVALID_WORKSHOP")
        if data.team_lead_id is not None:
            await self._ensure_lead(db, data.team_lead_id)

        team = Team(
            name=data.name.strip(),
            workshop_id=data.workshop_id,
            description=data.description,
            specialization=data.specialization,
            team_lead_id=data.team_lead_id,
            max_capacity=data.max_capacity,
        )
        if data.team_lead_id is not None:
            team.members.append(TeamMember(user_id=data.team_lead_id, member_role="lead"))
        db.add(team)
        await db.flush()
        await db.refresh(team)
        logger.info("Created team %s (%s)", team.name, team.id)
        return team

    async def update_team(self, db: AsyncSession, team_id: UUID, data: TeamUpdate) -> Team:
        team = await self.get_team(db, team_id)
        update_data = data.model_dump(exclude_unset=True)

        new_lead = update_data.get("team_lead_id")
        if new_lead is not None and new_lead != team.team_lead_id:
            await self._ensure_lead(db, new_lead)
            member = next((m for m in team.members if m.user_id == new_lead), None)
            if member is None:
                team.members.append(TeamMember(user_id=new_lead, member_role="lead"))
            else:
                member.member_role = "lead"
                member.is_active = True

        if "max_capacity" in update_data:
            active = sum(1 for m in team.members if m.is_active)
            if update_data["max_capacity"] < active:
                raise BadRequestError(
                    "현재 인원보다 적게 설정할 수 없습니다 (Capacity below current member count)",
                    code="CAPACITY_TOO_LOW",
                )

        for field, value in update_data.items():
            setattr(team, field, value)
        await db.flush()
        await db.refresh(team)
        return team

    async def add_member(self, db: AsyncSession, team_id: UUID, data: TeamMemberAdd) -> Team:
        """팀 구성원을 추가합니다.

        Add a member to the team.

        Raises:
            NotFoundError: 팀 또는 사용자 없음 (Team or user not found)
            DuplicateError: 이미 구성원 (User is already a member)
            BadRequestError: 정원 초과 (Team is at capacity)
        """
        team = await self.get_team(db, team_id)
        if await user_repository.get_by_id(db, data.user_id) is None:
            raise NotFoundError("사용자를 찾을 수 없습니다 (User not found)")
        if any(m.user_id == data.user_id for m in team.members):
            raise DuplicateError("이미 팀 구성원입니다 (User is already a member of this team)", code="ALREADY_MEMBER")
        if await team_repository.count_active_members(db, team.id) >= team.max_capacity:
            raise BadRequestError("팀 정원이 가득 찼습니다 (Team has reached maximum capacity)", code="TEAM_FULL")

        team.members.append(TeamMember(user_id=data.user_id, member_role=data.member_role))
        if data.member_role == "lead" and team.team_lead_id is None:
            team.team_lead_id = data.user_id
        await db.flush()
        await db.refresh(team)
        return team

    async def remove_member(self, db: AsyncSession, team_id: UUID, user_id: UUID) -> Team:
        """팀 구성원을 제거합니다. 팀장 제거 시 다른 lead 구성원으로 승계."""
        team = await self.get_team(db, team_id)
        member = next((m for m in team.members if m.user_id == user_id), None)
        if member is None:
            raise NotFoundError("팀 구성원이 아닙니다 (User is not a member of this team)")

        if team.team_lead_id == user_id:
            successor = next(
                (m for m in team.members if m.user_id != user_id and m.is_active and m.member_role == "lead"),
                None,
            )
            team.team_lead_id = successor.user_id if successor else None

        team.members.remove(member)
        await db.flush()
        await db.refresh(team)
        return team

    async def get_workload(self, db: AsyncSession, team_id: UUID) -> dict:
        """팀 작업량 (진행 중 요청 수와 구성원별 작업량).

        Team workload: open request count plus per-member workload counters.
        """
        team = await self.get_team(db, team_id)
        member_ids = [m.user_id for m in team.members if m.is_active]
        members: list[dict] = []
        if member_ids:
            rows = await db.execute(
                select(User.id, User.full_name, User.workload)
                .where(User.id.in_(member_ids))
                .order_by(User.workload, User.full_name)
            )
            members = [
                {"user_id": str(uid), "full_name": name, "workload": workload}
                for uid, name, workload in rows.all()
            ]
        return {
            "team_id": str(team.id),
            "open_requests": await team_repository.get_open_request_count(db, team.id),
            "members": members,
        }


team_service: TeamService = TeamService()
