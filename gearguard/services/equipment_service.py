"""설비 서비스 (설비 CRUD 비즈니스 로직).

Equipment Service (Business logic for equipment management).
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.equipment import Equipment
from gearguard.models.maintenance import MaintenanceRequest
from gearguard.repositories.equipment_repository import equipment_repository
from gearguard.repositories.maintenance_repository import maintenance_repository
from gearguard.repositories.team_repository import team_repository
from gearguard.repositories.user_repository import user_repository
from gearguard.repositories.workshop_repository import workshop_repository
from gearguard.schemas.equipment import EquipmentCreate, EquipmentUpdate
from gearguard.utils.exceptions import BadRequestError, DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


class EquipmentService:
    """설비 관련 비즈니스 로직을 처리하는 서비스."""

    def build_response(self, equipment: Equipment) -> dict:
        return {
            "id": str(equipment.id),
            "name": equipment.name,
            "serial_number": equipment.serial_number,
            "workshop_id": str(equipment.workshop_id),
            "category": equipment.category,
            "manufacturer": equipment.manufacturer,
            "model": equipment.model,
            "description": equipment.description,
            "location": equipment.location,
            "assigned_team_id": str(equipment.assigned_team_id),
            "primary_technician_id": str(equipment.primary_technician_id) if equipment.primary_technician_id else None,
            "status": equipment.status,
            "criticality": equipment.criticality,
            "purchase_date": equipment.purchase_date,
            "warranty_expiry": equipment.warranty_expiry,
            "is_active": equipment.is_active,
            "created_at": equipment.created_at,
            "updated_at": equipment.updated_at,
        }

    async def list_equipment(
        self,
        db: AsyncSession,
        workshop_id: UUID | None = None,
        team_id: UUID | None = None,
        category: str | None = None,
        status: str | None = None,
        search: str | None = None,
        include_inactive: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Equipment], int]:
        return await equipment_repository.list_equipment(
            db, workshop_id, team_id, category, status, search, include_inactive, page, per_page
        )

    async def get_equipment(self, db: AsyncSession, equipment_id: UUID) -> Equipment:
        equipment = await equipment_repository.get_by_id(db, equipment_id)
        if equipment is None:
            raise NotFoundError("설비를 찾을 수 없습니다 (Equipment not found)")
        return equipment

    async def _validate_refs(
        self,
        db: AsyncSession,
        workshop_id: UUID | None = None,
        team_id: UUID | None = None,
        technician_id: UUID | None = None,
    ) -> None:
        """참조 무결성 검사 (workshop/team/technician must exist)."""
        if workshop_id is not None and await workshop_repository.get_by_id(db, workshop_id) is None:
            raise BadRequestError("작업장을 찾을 수 없습니다 (Workshop not found)", code="INVALID_WORKSHOP")
        if team_id is not None and await team_repository.get_by_id(db, team_id) is None:
            raise BadRequestError("팀을 찾을 수 없습니다 (Team not found)", code="INVALID_TEAM")
        if technician_id is not None:
            technician = await user_repository.get_by_id(db, technician_id)
            if technician is None or technician.role != "technician":
                raise BadRequestError("유효하지 않은 기술자입니다 (Invalid technician)", code="INVALID_TECHNICIAN")

    async def create_equipment(self, db: AsyncSession, data: EquipmentCreate, created_by: UUID) -> Equipment:
        if await equipment_repository.get_by_serial(db, data.serial_number) is not None:
            raise DuplicateError("이미 등록된 시리얼 번호입니다 (Serial number already exists)", code="SERIAL_EXISTS")
        await self._validate_refs(db, data.workshop_id, data.assigned_team_id, data.primary_technician_id)

        values = data.model_dump()
        values["location"] = data.location.model_dump()
        values["created_by"] = created_by
        equipment = await equipment_repository.create(db, values)
        logger.info("Registered equipment %s (%s)", equipment.serial_number, equipment.id)
        return equipment

    async def update_equipment(self, db: AsyncSession, equipment_id: UUID, data: EquipmentUpdate) -> Equipment:
        update_data = data.model_dump(exclude_unset=True)
        await self._validate_refs(
            db,
            team_id=update_data.get("assigned_team_id"),
            technician_id=update_data.get("primary_technician_id"),
        )
        if "location" in update_data:
            update_data["location"] = data.location.model_dump() if data.location else None
        updated = await equipment_repository.update(db, equipment_id, update_data)
        if updated is None:
            raise NotFoundError("설비를 찾을 수 없습니다 (Equipment not found)")
        return updated

    async def deactivate_equipment(self, db: AsyncSession, equipment_id: UUID) -> Equipment:
        """설비를 비활성화합니다 (정비 이력 보존을 위해 물리 삭제하지 않음)."""
        equipment = await self.get_equipment(db, equipment_id)
        equipment.is_active = False
        await db.flush()
        return equipment

    async def get_maintenance_history(
        self,
        db: AsyncSession,
        equipment_id: UUID,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[MaintenanceRequest], int]:
        await self.get_equipment(db, equipment_id)
        return await maintenance_repository.list_for_equipment(db, equipment_id, page, per_page)


equipment_service: EquipmentService = EquipmentService()
