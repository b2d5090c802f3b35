"""사용자 라우터 (사용자 관리 및 기술자 디렉터리).

User Router: Admin user management and the technician directory used
when assigning maintenance requests.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.api.deps import require_admin, require_staff, sensitive_operation
from gearguard.database import get_db
from gearguard.models.user import User
from gearguard.schemas.common import PaginatedResponse
from gearguard.schemas.user import UserCreate, UserUpdate, WorkloadUpdate
from gearguard.services.user_service import user_service
from gearguard.utils.constants import UserRole, UserStatus
from gearguard.utils.pagination import page_envelope

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    role: Annotated[UserRole | None, Query(description="역할 필터")] = None,
    status: Annotated[UserStatus | None, Query(description="상태 필터")] = None,
    workshop_id: Annotated[UUID | None, Query(description="작업장 필터")] = None,
    search: Annotated[str | None, Query(description="이름/이메일 검색")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    """사용자 목록을 필터 조건으로 조회합니다.

    List users with optional role/status/workshop filters and a search term.
    """
    users, total = await user_service.list_users(db, role, status, workshop_id, search, page, per_page)
    return page_envelope([user_service.build_response(u) for u in users], total, page, per_page)


@router.get("/technicians")
async def list_technicians(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    skill: Annotated[str | None, Query(description="필요 기술")] = None,
    team_id: Annotated[UUID | None, Query(description="팀 필터")] = None,
) -> list[dict]:
    """배정 가능한 기술자 목록 (Active technicians, lowest workload first)."""
    technicians = await user_service.list_available_technicians(db, skill=skill, team_id=team_id)
    return [user_service.build_response(t) for t in technicians]


@router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    return user_service.build_response(await user_service.get_user(db, user_id))


@router.post("", status_code=201)
async def create_user(
    data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    _limited: Annotated[User, Depends(sensitive_operation("create_user"))],
) -> dict:
    """새 사용자를 생성합니다 (민감 작업 속도 제한 대상).

    Create a user account. Subject to the sensitive-operation rate limit.
    """
    user = await user_service.create_user(db, data)
    await db.commit()
    return user_service.build_response(user)


@router.put("/{user_id}")
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    user = await user_service.update_user(db, user_id, data)
    await db.commit()
    return user_service.build_response(user)


@router.delete("/{user_id}")
async def deactivate_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """사용자를 비활성화합니다 (소프트 삭제).

    Deactivate a user. Accounts are kept because requests reference them.
    """
    user = await user_service.deactivate_user(db, user_id, current_user.id)
    await db.commit()
    return user_service.build_response(user)


@router.put("/{user_id}/workload")
async def set_workload(
    user_id: UUID,
    data: WorkloadUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """작업량 카운터 수동 보정 (Admin correction of a drifted workload counter)."""
    user = await user_service.set_workload(db, user_id, data.workload)
    await db.commit()
    return user_service.build_response(user)
