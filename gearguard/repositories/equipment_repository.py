"""설비 레포지토리.

Equipment Repository (Equipment listing and lookup queries).
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.equipment import Equipment
from gearguard.repositories.base import BaseRepository


class EquipmentRepository(BaseRepository[Equipment]):
    """설비 레포지토리.

    Extends:
        BaseRepository[Equipment]
    """

    def __init__(self) -> None:
        super().__init__(Equipment)

    async def get_by_serial(self, db: AsyncSession, serial_number: str) -> Equipment | None:
        result = await db.execute(select(Equipment).where(Equipment.serial_number == serial_number))
        return result.scalar_one_or_none()

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
        """필터 조건으로 설비 목록을 조회합니다.

        List equipment with optional filters. Deactivated equipment is
        hidden unless include_inactive is set.

        Returns:
            tuple[Sequence[Equipment], int]: (설비 목록, 전체 개수)
        """
        query: Select = select(Equipment)
        if not include_inactive:
            query = query.where(Equipment.is_active == True)  # noqa: E712
        if workshop_id is not None:
            query = query.where(Equipment.workshop_id == workshop_id)
        if team_id is not None:
            query = query.where(Equipment.assigned_team_id == team_id)
        if category is not None:
            query = query.where(Equipment.category == category)
        if status is not None:
            query = query.where(Equipment.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(Equipment.name.ilike(pattern), Equipment.serial_number.ilike(pattern))
            )
        query = query.order_by(Equipment.name, Equipment.id)
        return await self.get_paginated(db, query, page, per_page)

    async def count_critical_attention(self, db: AsyncSession) -> int:
        """정비/가동 중지 상태의 핵심 설비 수.

        Active equipment of Critical criticality that is under maintenance or
        out of service.
        """
        total = await db.scalar(
            select(func.count(Equipment.id)).where(
                Equipment.is_active == True,  # noqa: E712
                Equipment.criticality == "Critical",
                Equipment.status.in_(("Maintenance", "Out of Service")),
            )
        )
        return total or 0


equipment_repository: EquipmentRepository = EquipmentRepository()
