"""설비 라우터 (설비 등록/조회/수정 및 정비 이력).

Equipment Router (Equipment registry and per-equipment maintenance history).
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.api.deps import get_current_user, require_staff
from gearguard.database import get_db
from gearguard.models.user import User
from gearguard.schemas.common import PaginatedResponse
from gearguard.schemas.equipment import EquipmentCreate, EquipmentUpdate
from gearguard.services.equipment_service import equipment_service
from gearguard.services.maintenance_service import maintenance_service
from gearguard.utils.constants import EquipmentCategory, EquipmentStatus
from gearguard.utils.pagination import page_envelope

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_equipment(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    workshop_id: Annotated[UUID | None, Query(description="작업장 필터")] = None,
    team_id: Annotated[UUID | None, Query(description="담당 팀 필터")] = None,
    category: Annotated[EquipmentCategory | None, Query(description="분류 필터")] = None,
    status: Annotated[EquipmentStatus | None, Query(description="상태 필터")] = None,
    search: Annotated[str | None, Query(description="이름/시리얼 검색")] = None,
    include_inactive: bool = False,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    """설비 목록 (기본적으로 비활성 설비 제외).

    List equipment. Deactivated equipment is hidden unless include_inactive.
    """
    items, total = await equipment_service.list_equipment(
        db, workshop_id, team_id, category, status, search, include_inactive, page, per_page
    )
    return page_envelope([equipment_service.build_response(e) for e in items], total, page, per_page)


@router.get("/{equipment_id}")
async def get_equipment(
    equipment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return equipment_service.build_response(await equipment_service.get_equipment(db, equipment_id))


@router.post("", status_code=201)
async def create_equipment(
    data: EquipmentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> dict:
    equipment = await equipment_service.create_equipment(db, data, current_user.id)
    await db.commit()
    return equipment_service.build_response(equipment)


@router.put("/{equipment_id}")
async def update_equipment(
    equipment_id: UUID,
    data: EquipmentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> dict:
    equipment = await equipment_service.update_equipment(db, equipment_id, data)
    await db.commit()
    return equipment_service.build_response(equipment)


@router.delete("/{equipment_id}")
async def deactivate_equipment(
    equipment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> dict:
    """설비를 비활성화합니다 (정비 이력은 보존).

    Deactivate equipment. History is kept and no new requests are accepted.
    """
    equipment = await equipment_service.deactivate_equipment(db, equipment_id)
    await db.commit()
    return equipment_service.build_response(equipment)


@router.get("/{equipment_id}/maintenance-history", response_model=PaginatedResponse)
async def get_maintenance_history(
    equipment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    requests, total = await equipment_service.get_maintenance_history(db, equipment_id, page, per_page)
    return page_envelope([maintenance_service.build_response(r) for r in requests], total, page, per_page)
