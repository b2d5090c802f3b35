"""작업장 레포지토리.

Workshop Repository (Workshop lookup and listing queries).
"""

from typing import Sequence

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.workshop import Workshop
from gearguard.repositories.base import BaseRepository


class WorkshopRepository(BaseRepository[Workshop]):

    def __init__(self) -> None:
        super().__init__(Workshop)

    async def get_by_code(self, db: AsyncSession, code: str) -> Workshop | None:
        result = await db.execute(select(Workshop).where(Workshop.code == code.upper()))
        return result.scalar_one_or_none()

    async def list_workshops(
        self,
        db: AsyncSession,
        status: str | None = None,
        search: str | None = None,
    ) -> Sequence[Workshop]:
        query: Select = select(Workshop)
        if status is not None:
            query = query.where(Workshop.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(Workshop.name.ilike(pattern), Workshop.code.ilike(pattern)))
        result = await db.execute(query.order_by(Workshop.name))
        return result.scalars().all()


workshop_repository: WorkshopRepository = WorkshopRepository()
