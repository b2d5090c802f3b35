"""대시보드 라우터 (정비 요청 통계 API).

Dashboard Router (Request statistics scoped to the caller, technician
workload board and alerts).
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.api.deps import get_current_user
from gearguard.database import get_db
from gearguard.models.types import as_utc
from gearguard.models.user import User
from gearguard.repositories.maintenance_repository import RequestFilter
from gearguard.services.dashboard_service import dashboard_service

router: APIRouter = APIRouter()


@router.get("/stats")
async def get_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    workshop_id: Annotated[UUID | None, Query(description="작업장 필터")] = None,
    team_id: Annotated[UUID | None, Query(description="담당 팀 필터")] = None,
    technician_id: Annotated[UUID | None, Query(description="담당 기술자 필터")] = None,
    date_from: Annotated[datetime | None, Query(description="생성일 시작 (포함)")] = None,
    date_to: Annotated[datetime | None, Query(description="생성일 끝 (미포함)")] = None,
) -> dict:
    """정비 요청 통계를 조회합니다.

    Counts by status/priority/type, overdue count and average resolution
    hours over Completed requests, within the caller's visibility scope.
    """
    f = RequestFilter(
        workshop_id=workshop_id,
        team_id=team_id,
        technician_id=technician_id,
        created_from=as_utc(date_from),
        created_to=as_utc(date_to),
    )
    return await dashboard_service.get_stats(db, current_user, f)


@router.get("/recent")
async def get_recent(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    limit: Annotated[int, Query(ge=1, le=50)] = 5,
) -> list[dict]:
    return await dashboard_service.get_recent(db, current_user, limit)


@router.get("/workload/technicians")
async def get_technician_workload(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """기술자 작업량 현황 (관리자: 전체, 팀장: 자기 팀).

    Technician workload board with per-technician open assignments and a
    summary (count, average workload, overloaded technicians).
    """
    return await dashboard_service.get_technician_workload(db, current_user)


@router.get("/alerts")
async def get_alerts(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[dict]:
    return await dashboard_service.get_alerts(db, current_user)
