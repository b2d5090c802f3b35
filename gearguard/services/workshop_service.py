"""작업장 서비스.

Workshop service (Business logic for workshop CRUD).
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.workshop import Workshop
from gearguard.repositories.workshop_repository import workshop_repository
from gearguard.schemas.workshop import WorkshopCreate, WorkshopUpdate
from gearguard.utils.exceptions import DuplicateError, NotFoundError


class WorkshopService:

    def build_response(self, workshop: Workshop) -> dict:
        return {
            "id": str(workshop.id),
            "name": workshop.name,
            "code": workshop.code,
            "description": workshop.description,
            "location": workshop.location,
            "status": workshop.status,
            "specializations": list(workshop.specializations or []),
            "created_by": str(workshop.created_by) if workshop.created_by else None,
            "created_at": workshop.created_at,
            "updated_at": workshop.updated_at,
        }

    async def list_workshops(
        self,
        db: AsyncSession,
        status: str | None = None,
        search: str | None = None,
    ) -> Sequence[Workshop]:
        return await workshop_repository.list_workshops(db, status, search)

    async def get_workshop(self, db: AsyncSession, workshop_id: UUID) -> Workshop:
        workshop = await workshop_repository.get_by_id(db, workshop_id)
        if workshop is None:
            raise NotFoundError("작업장을 찾을 수 없습니다 (Workshop not found)")
        return workshop

    async def create_workshop(self, db: AsyncSession, data: WorkshopCreate, created_by: UUID) -> Workshop:
        if await workshop_repository.get_by_code(db, data.code) is not None:
            raise DuplicateError("이미 사용 중인 작업장 코드입니다 (Workshop code already exists)", code="WORKSHOP_CODE_EXISTS")
        return await workshop_repository.create(
            db,
            {
                "name": data.name.strip(),
                "code": data.code,
                "description": data.description,
                "location": data.location.model_dump() if data.location else None,
                "specializations": data.specializations,
                "created_by": created_by,
            },
        )

    async def update_workshop(self, db: AsyncSession, workshop_id: UUID, data: WorkshopUpdate) -> Workshop:
        update_data = data.model_dump(exclude_unset=True)
        updated = await workshop_repository.update(db, workshop_id, update_data)
        if updated is None:
            raise NotFoundError("작업장을 찾을 수 없습니다 (Workshop not found)")
        return updated


workshop_service: WorkshopService = WorkshopService()
