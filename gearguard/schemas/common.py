"""여러 API가 공유하는 응답 스키마.

Response envelopes shared across the GearGuard API.
"""

from typing import Any

from pydantic import BaseModel, Field


class PaginatedResponse(BaseModel):
    """목록 응답 봉투 (List envelope).

    ``pages`` is derived from ``total`` and ``per_page`` by
    ``gearguard.utils.pagination.page_envelope``.
    """

    items: list[Any] = Field(default_factory=list)
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    per_page: int = Field(ge=1)
    pages: int = Field(default=0, ge=0)


class MessageResponse(BaseModel):
    message: str
