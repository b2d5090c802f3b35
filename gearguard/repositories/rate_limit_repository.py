"""속도 제한 레포지토리.

Rate limit Repository (Sliding-window hit counting in the shared database).
"""

from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.rate_limit import RateLimitHit
from gearguard.repositories.base import BaseRepository


class RateLimitRepository(BaseRepository[RateLimitHit]):

    def __init__(self) -> None:
        super().__init__(RateLimitHit)

    async def count_since(self, db: AsyncSession, key: str, since: datetime) -> int:
        query = (
            select(func.count())
            .select_from(RateLimitHit)
            .where(RateLimitHit.key == key, RateLimitHit.occurred_at > since)
        )
        return (await db.execute(query)).scalar() or 0

    async def record_hit(self, db: AsyncSession, key: str, occurred_at: datetime) -> None:
        db.add(RateLimitHit(key=key, occurred_at=occurred_at))
        await db.flush()

    async def purge_before(self, db: AsyncSession, key: str, cutoff: datetime) -> None:
        """윈도우 밖의 기록 삭제 (Drop hits that fell out of the window)."""
        await db.execute(
            delete(RateLimitHit)
            .where(RateLimitHit.key == key, RateLimitHit.occurred_at <= cutoff)
            .execution_options(synchronize_session=False)
        )


rate_limit_repository: RateLimitRepository = RateLimitRepository()
