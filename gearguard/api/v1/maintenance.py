"""정비 요청 라우터 (정비 요청 수명 주기 API).

Maintenance Request Router: Creation, listing, assignment, status
transitions, ledger appends, feedback, calendar and overdue views.

Permissions:
    - 조회: 관리자, 요청자, 담당 기술자, 담당 팀 기술자
      (Read: admin, creator, assigned technician, assigned team's technicians)
    - 수정: 관리자, 요청자 (Update: admin or creator)
    - 배정: 관리자, 팀장 (Assign: admin or team lead, rate limited)
    - 상태 변경/작업 기록/부품: 관리자, 담당 기술자
      (Status, work notes, parts: admin or assigned technician)
    - 피드백: 요청자 (Feedback: creator, after completion)
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.api.deps import get_current_user, require_assigner, sensitive_operation
from gearguard.database import get_db
from gearguard.models.types import as_utc
from gearguard.models.user import User
from gearguard.repositories.maintenance_repository import RequestFilter
from gearguard.schemas.common import PaginatedResponse
from gearguard.schemas.maintenance import (
    AssignRequest,
    FeedbackCreate,
    MaintenanceRequestCreate,
    MaintenanceRequestUpdate,
    PartsAddRequest,
    StatusUpdate,
    WorkNoteCreate,
)
from gearguard.services.assignment_service import assignment_service
from gearguard.services.dashboard_service import dashboard_service
from gearguard.services.maintenance_service import maintenance_service
from gearguard.utils.constants import MaintenanceType, Priority, RequestStatus
from gearguard.utils.pagination import page_envelope

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_requests(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    status: Annotated[RequestStatus | None, Query(description="상태 필터")] = None,
    type: Annotated[MaintenanceType | None, Query(description="유형 필터")] = None,
    priority: Annotated[Priority | None, Query(description="우선순위 필터")] = None,
    technician_id: Annotated[UUID | None, Query(description="담당 기술자 필터")] = None,
    team_id: Annotated[UUID | None, Query(description="담당 팀 필터")] = None,
    equipment_id: Annotated[UUID | None, Query(description="설비 필터")] = None,
    workshop_id: Annotated[UUID | None, Query(description="작업장 필터")] = None,
    search: Annotated[str | None, Query(description="제목/설명/번호 검색")] = None,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    """정비 요청 목록 (역할별 조회 범위 적용, 최신순).

    List maintenance requests visible to the caller, newest first.
    """
    f = RequestFilter(
        status=status,
        type=type,
        priority=priority,
        technician_id=technician_id,
        team_id=team_id,
        equipment_id=equipment_id,
        workshop_id=workshop_id,
        search=search,
        created_from=as_utc(created_from),
        created_to=as_utc(created_to),
    )
    requests, total = await maintenance_service.list_requests(db, current_user, f, page, per_page)
    return page_envelope([maintenance_service.build_response(r) for r in requests], total, page, per_page)


@router.post("", status_code=201)
async def create_request(
    data: MaintenanceRequestCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """정비 요청을 생성합니다.

    Create a maintenance request. The request number, SLA deadlines and due
    date are assigned by the server.
    """
    request = await maintenance_service.create_request(db, data, current_user)
    await db.commit()
    return maintenance_service.build_response(request)


@router.get("/calendar")
async def get_calendar(
    start: datetime,
    end: datetime,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    team_id: Annotated[UUID | None, Query(description="담당 팀 필터")] = None,
    technician_id: Annotated[UUID | None, Query(description="담당 기술자 필터")] = None,
) -> list[dict]:
    """캘린더 이벤트: Requests scheduled or due within [start, end)."""
    f = RequestFilter(team_id=team_id, technician_id=technician_id)
    return await dashboard_service.get_calendar(db, current_user, as_utc(start), as_utc(end), f)


@router.get("/overdue")
async def get_overdue(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    team_id: Annotated[UUID | None, Query(description="담당 팀 필터")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[dict]:
    return await dashboard_service.get_overdue(db, current_user, RequestFilter(team_id=team_id), limit)


@router.get("/{request_id}")
async def get_request(
    request_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    request = await maintenance_service.get_visible_request(db, request_id, current_user)
    return maintenance_service.build_response(request)


@router.put("/{request_id}")
async def update_request(
    request_id: UUID,
    data: MaintenanceRequestUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    request = await maintenance_service.update_request(db, request_id, data, current_user)
    await db.commit()
    return maintenance_service.build_response(request)


@router.post("/{request_id}/assign")
async def assign_request(
    request_id: UUID,
    data: AssignRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_assigner)],
    _limited: Annotated[User, Depends(sensitive_operation("assign"))],
) -> dict:
    """기술자 및/또는 팀을 배정합니다.

    Assign a technician and/or team. Invalid references fail with
    INVALID_TECHNICIAN or INVALID_TEAM and leave the request unchanged.
    """
    request = await assignment_service.assign(db, request_id, data, current_user)
    await db.commit()
    return maintenance_service.build_response(request)


@router.post("/{request_id}/auto-assign")
async def auto_assign_request(
    request_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_assigner)],
    _limited: Annotated[User, Depends(sensitive_operation("assign"))],
) -> dict:
    """작업량이 가장 적은 적격 기술자 자동 배정.

    Auto-assign the least-loaded technician skilled in the equipment category.
    """
    request = await assignment_service.auto_assign(db, request_id, current_user)
    await db.commit()
    return maintenance_service.build_response(request)


@router.patch("/{request_id}/status")
async def change_status(
    request_id: UUID,
    data: StatusUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    request = await maintenance_service.change_status(db, request_id, data, current_user)
    await db.commit()
    return maintenance_service.build_response(request)


@router.post("/{request_id}/work-notes", status_code=201)
async def add_work_note(
    request_id: UUID,
    data: WorkNoteCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    request = await maintenance_service.add_work_note(db, request_id, data, current_user)
    await db.commit()
    return maintenance_service.build_response(request)


@router.post("/{request_id}/parts", status_code=201)
async def add_parts(
    request_id: UUID,
    data: PartsAddRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """사용 부품 추가 (부품 비용은 원장 전체에서 다시 계산).

    Append parts; cost.parts is recomputed from the full ledger.
    """
    request = await maintenance_service.add_parts(db, request_id, data, current_user)
    await db.commit()
    return maintenance_service.build_response(request)


@router.post("/{request_id}/feedback")
async def submit_feedback(
    request_id: UUID,
    data: FeedbackCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    request = await maintenance_service.submit_feedback(db, request_id, data, current_user)
    await db.commit()
    return maintenance_service.build_response(request)
