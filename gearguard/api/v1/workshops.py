"""작업장 라우터 (작업장 조회 및 관리).

Workshop Router (Workshop listing for every user, management for admins).
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.api.deps import get_current_user, require_admin
from gearguard.database import get_db
from gearguard.models.user import User
from gearguard.schemas.workshop import WorkshopCreate, WorkshopUpdate
from gearguard.services.workshop_service import workshop_service
from gearguard.utils.constants import WorkshopStatus

router: APIRouter = APIRouter()


@router.get("")
async def list_workshops(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    status: Annotated[WorkshopStatus | None, Query(description="상태 필터")] = None,
    search: Annotated[str | None, Query(description="이름/코드 검색")] = None,
) -> list[dict]:
    workshops = await workshop_service.list_workshops(db, status, search)
    return [workshop_service.build_response(w) for w in workshops]


@router.get("/{workshop_id}")
async def get_workshop(
    workshop_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return workshop_service.build_response(await workshop_service.get_workshop(db, workshop_id))


@router.post("", status_code=201)
async def create_workshop(
    data: WorkshopCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """작업장을 생성합니다 (코드는 대문자로 저장되며 고유해야 함).

    Create a workshop. Codes are stored upper-cased and must be unique.
    """
    workshop = await workshop_service.create_workshop(db, data, current_user.id)
    await db.commit()
    return workshop_service.build_response(workshop)


@router.put("/{workshop_id}")
async def update_workshop(
    workshop_id: UUID,
    data: WorkshopUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    workshop = await workshop_service.update_workshop(db, workshop_id, data)
    await db.commit()
    return workshop_service.build_response(workshop)
