"""팀 라우터 (팀 CRUD, 구성원 관리, 작업량 조회).

Team Router (Team CRUD, membership management and workload overview).
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.api.deps import get_current_user, require_admin, require_staff
from gearguard.database import get_db
from gearguard.models.user import User
from gearguard.schemas.team import TeamCreate, TeamMemberAdd, TeamUpdate
from gearguard.services.team_service import team_service
from gearguard.utils.constants import TeamStatus

router: APIRouter = APIRouter()


@router.get("")
async def list_teams(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    workshop_id: Annotated[UUID | None, Query(description="작업장 필터")] = None,
    status: Annotated[TeamStatus | None, Query(description="상태 필터")] = None,
) -> list[dict]:
    teams = await team_service.list_teams(db, workshop_id=workshop_id, status=status)
    return [await team_service.build_response(db, t) for t in teams]


@router.get("/{team_id}")
async def get_team(
    team_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return await team_service.build_response(db, await team_service.get_team(db, team_id))


@router.post("", status_code=201)
async def create_team(
    data: TeamCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    team = await team_service.create_team(db, data)
    await db.commit()
    return await team_service.build_response(db, team)


@router.put("/{team_id}")
async def update_team(
    team_id: UUID,
    data: TeamUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    team = await team_service.update_team(db, team_id, data)
    await db.commit()
    return await team_service.build_response(db, team)


@router.post("/{team_id}/members", status_code=201)
async def add_member(
    team_id: UUID,
    data: TeamMemberAdd,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """팀 구성원을 추가합니다 (정원 초과 시 400 TEAM_FULL).

    Add a team member. Rejected with TEAM_FULL once max_capacity is reached.
    """
    team = await team_service.add_member(db, team_id, data)
    await db.commit()
    return await team_service.build_response(db, team)


@router.delete("/{team_id}/members/{user_id}")
async def remove_member(
    team_id: UUID,
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    team = await team_service.remove_member(db, team_id, user_id)
    await db.commit()
    return await team_service.build_response(db, team)


@router.get("/{team_id}/workload")
async def get_workload(
    team_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> dict:
    return await team_service.get_workload(db, team_id)
