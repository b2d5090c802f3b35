"""레포지토리 공통 기반 클래스.

Shared base for the GearGuard repositories: primary-key lookup, paginated
listing, insert and partial update. Repositories flush but never commit;
the router owns the transaction.

Usage:
    class WorkshopRepository(BaseRepository[Workshop]):
        def __init__(self) -> None:
            super().__init__(Workshop)
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, inspect
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.database import Base
from gearguard.utils.pagination import paginate

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """모델 하나에 대한 공통 쿼리.

    Attributes:
        model: SQLAlchemy 모델 클래스 (Mapped model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model
        # 부분 업데이트 허용 컬럼 (Column attributes accepted by update)
        self._columns: frozenset[str] = frozenset(attr.key for attr in inspect(model).column_attrs)

    async def get_by_id(self, db: AsyncSession, record_id: UUID) -> ModelType | None:
        """기본 키 조회 (세션에 이미 있으면 재사용).

        Primary-key lookup; reuses the instance already in the session.
        """
        return await db.get(self.model, record_id)

    async def get_paginated(
        self,
        db: AsyncSession,
        query: Select,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        return await paginate(db, query, page, per_page)

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> ModelType:
        """레코드 생성 후 서버 기본값까지 다시 읽어 반환합니다.

        Insert a record and refresh it so server-side defaults are loaded.
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        record_id: UUID,
        update_data: dict[str, Any],
    ) -> ModelType | None:
        """부분 업데이트. 매핑된 컬럼만 반영하며 None 값도 설정합니다.

        Apply a partial update (typically ``model_dump(exclude_unset=True)``).
        Keys that are not mapped columns are ignored; None clears a column.

        Returns:
            ModelType | None: 업데이트된 레코드, 없으면 None (Updated record or None)
        """
        db_obj: ModelType | None = await self.get_by_id(db, record_id)
        if db_obj is None:
            return None

        for field, value in update_data.items():
            if field in self._columns:
                setattr(db_obj, field, value)

        await db.flush()
        await db.refresh(db_obj)
        return db_obj
