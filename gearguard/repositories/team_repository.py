"""팀 레포지토리 (팀 및 구성원 쿼리 담당).

Team Repository (Team and team membership queries).
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.maintenance import MaintenanceRequest
from gearguard.models.team import Team, TeamMember
from gearguard.repositories.base import BaseRepository
from gearguard.utils.constants import TERMINAL_STATUSES


class TeamRepository(BaseRepository[Team]):
    """팀 레포지토리.

    Extends:
        BaseRepository[Team]
    """

    def __init__(self) -> None:
        super().__init__(Team)

    async def list_teams(
        self,
        db: AsyncSession,
        workshop_id: UUID | None = None,
        status: str | None = None,
        team_ids: list[UUID] | None = None,
    ) -> Sequence[Team]:
        """팀 목록을 조회합니다.

        List teams, optionally scoped to a workshop, a status or an id set.
        """
        query: Select = select(Team)
        if workshop_id is not None:
            query = query.where(Team.workshop_id == workshop_id)
        if status is not None:
            query = query.where(Team.status == status)
        if team_ids is not None:
            query = query.where(Team.id.in_(team_ids))
        result = await db.execute(query.order_by(Team.name))
        return result.scalars().all()

    async def count_active_members(self, db: AsyncSession, team_id: UUID) -> int:
        query = select(func.count()).select_from(TeamMember).where(
            TeamMember.team_id == team_id, TeamMember.is_active == True  # noqa: E712
        )
        return (await db.execute(query)).scalar() or 0

    async def get_open_request_count(self, db: AsyncSession, team_id: UUID) -> int:
        """팀의 진행 중 정비 요청 수: Open (non-terminal) requests assigned to the team."""
        query = (
            select(func.count())
            .select_from(MaintenanceRequest)
            .where(
                MaintenanceRequest.assigned_team_id == team_id,
                MaintenanceRequest.status.not_in(TERMINAL_STATUSES),
            )
        )
        return (await db.execute(query)).scalar() or 0


team_repository: TeamRepository = TeamRepository()
