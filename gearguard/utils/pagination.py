"""목록 API 페이지네이션.

Offset pagination for list endpoints and the response envelope they share:
``{"items", "total", "page", "per_page", "pages"}``.
"""

import math
from typing import Any, Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def paginate(
    db: AsyncSession,
    query: Select[Any],
    page: int = 1,
    per_page: int = 20,
) -> tuple[Sequence[Any], int]:
    """한 페이지의 항목과 전체 개수를 반환합니다.

    Return one page of ``query`` plus the total row count. When a page is
    only partly filled the total follows from the offset, otherwise it is
    counted over the unordered query.
    """
    offset: int = (page - 1) * per_page
    items: Sequence[Any] = (await db.execute(query.offset(offset).limit(per_page))).scalars().all()

    if 0 < len(items) < per_page:
        return items, offset + len(items)
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total: int = (await db.execute(count_query)).scalar() or 0
    return items, total


def page_envelope(items: list[Any], total: int, page: int, per_page: int) -> dict[str, Any]:
    """목록 응답 딕셔너리 (Standard paginated response body)."""
    return {
        "items": items,
        "total": total,
        "page": page,
        "per_page": per_page,
        "pages": math.ceil(total / per_page) if per_page else 0,
    }
