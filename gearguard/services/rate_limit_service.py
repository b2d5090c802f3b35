"""민감 작업 속도 제한 서비스.

Sliding-window rate limiter for sensitive operations. Hits are kept in the
database so every server process enforces the same window.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.config import settings
from gearguard.repositories.rate_limit_repository import rate_limit_repository
from gearguard.utils.exceptions import TooManyRequestsError

logger = logging.getLogger(__name__)


class RateLimitService:

    async def hit(
        self,
        db: AsyncSession,
        key: str,
        limit: int | None = None,
        window_seconds: int | None = None,
        now: datetime | None = None,
    ) -> int:
        """작업 1회를 기록합니다. 한도 초과 시 429.

        Record one hit for ``key`` and return the number of hits in the
        current window, including this one.

        Raises:
            TooManyRequestsError: 윈도우 내 한도 초과 (Limit reached in the window)
        """
        limit = limit if limit is not None else settings.SENSITIVE_OPS_LIMIT
        window = window_seconds if window_seconds is not None else settings.SENSITIVE_OPS_WINDOW_SECONDS
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(seconds=window)

        count = await rate_limit_repository.count_since(db, key, since)
        if count >= limit:
            logger.warning("Rate limit exceeded for %s (%d in %ds)", key, count, window)
            raise TooManyRequestsError(
                "요청이 너무 많습니다. 잠시 후 다시 시도하세요 (Too many sensitive operations, try again later)"
            )

        await rate_limit_repository.purge_before(db, key, since)
        await rate_limit_repository.record_hit(db, key, now)
        return count + 1


rate_limit_service: RateLimitService = RateLimitService()
