"""정비 요청 Pydantic 요청 스키마 정의.

Maintenance request Pydantic request schema definitions.
Every operation has its own typed payload; unknown fields are rejected
with 422 instead of being silently dropped.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gearguard.utils.constants import (
    MaintenanceType,
    Priority,
    RequestCategory,
    RequestStatus,
    Severity,
)


def _normalize_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    # 소문자 변환 및 중복 제거 (Lower-case and de-duplicate, keeping order)
    return list(dict.fromkeys(t.strip().lower() for t in tags if t and t.strip()))


class RequestLocation(BaseModel):
    """정비 위치 (Structured location of the job)."""

    building: str | None = Field(None, max_length=100)
    floor: str | None = Field(None, max_length=20)
    room: str | None = Field(None, max_length=50)
    specific_location: str | None = Field(None, max_length=200)


class MaintenanceRequestCreate(BaseModel):
    """정비 요청 생성 스키마.

    Maintenance request creation schema.
    due_date is optional: when omitted it becomes scheduled_date, or
    the priority default offset from creation.

    Attributes:
        title: 제목 (Title, max 200)
        description: 설명 (Description, max 2000)
        type: 정비 유형 (Corrective | Preventive | Predictive | Emergency)
        equipment_id: 대상 설비 (Equipment being serviced)
        priority: 우선순위 (Drives SLA deadlines)
        urgency / impact: 긴급도/영향도 (Independent classification axes)
    """

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    type: MaintenanceType = "Corrective"
    category: RequestCategory | None = None
    equipment_id: UUID
    location: RequestLocation | None = None
    priority: Priority = "Medium"
    urgency: Severity = "Medium"
    impact: Severity = "Medium"
    scheduled_date: datetime | None = None
    due_date: datetime | None = None
    estimated_duration: float | None = Field(None, ge=0)
    tags: list[str] = []

    @field_validator("title", "description")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("tags")
    @classmethod
    def _tags(cls, v: list[str]) -> list[str]:
        return _normalize_tags(v) or []


class MaintenanceRequestUpdate(BaseModel):
    """정비 요청 수정 스키마 (부분 업데이트).

    Explicit set of fields a creator or admin may change after creation.
    Assignment, status and ledgers have their own operations.
    Changing priority recomputes the SLA deadlines.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=2000)
    type: MaintenanceType | None = None
    category: RequestCategory | None = None
    location: RequestLocation | None = None
    priority: Priority | None = None
    urgency: Severity | None = None
    impact: Severity | None = None
    scheduled_date: datetime | None = None
    due_date: datetime | None = None
    estimated_duration: float | None = Field(None, ge=0)
    tags: list[str] | None = None
    cost_labor: float | None = Field(None, ge=0)
    cost_external: float | None = Field(None, ge=0)

    @field_validator(
        "title", "description", "type", "category", "priority", "urgency", "impact",
        "due_date", "tags", "cost_labor", "cost_external",
    )
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v

    @field_validator("tags")
    @classmethod
    def _tags(cls, v: list[str]) -> list[str]:
        return _normalize_tags(v) or []


class AssignRequest(BaseModel):
    """배정 요청 스키마 (technician_id, team_id 중 하나 이상 필요)."""

    model_config = ConfigDict(extra="forbid")

    technician_id: UUID | None = None
    team_id: UUID | None = None

    @model_validator(mode="after")
    def _at_least_one(self) -> "AssignRequest":
        if self.technician_id is None and self.team_id is None:
            raise ValueError("technician_id or team_id is required")
        return self


class Attachment(BaseModel):
    """첨부파일 메타데이터: Attachment metadata (file storage is external)."""

    filename: str = Field(..., min_length=1, max_length=255)
    file_path: str = Field(..., min_length=1, max_length=500)
    file_size: int | None = Field(None, ge=0)
    mime_type: str | None = Field(None, max_length=100)


class WorkNoteCreate(BaseModel):
    """작업 기록 추가 스키마.

    Attributes:
        note: 작업 내용 (Note text, max 1000)
        hours_worked: 작업 시간 (Hours for this entry, 0..24)
        attachments: 첨부파일 (Attachment metadata)
    """

    model_config = ConfigDict(extra="forbid")

    note: str = Field(..., min_length=1, max_length=1000)
    hours_worked: float = Field(0, ge=0, le=24)
    attachments: list[Attachment] = []


class StatusUpdate(BaseModel):
    """상태 변경 스키마 (선택적으로 작업 기록을 함께 추가).

    Status transition payload; an optional work note is appended in the
    same unit of work.
    """

    model_config = ConfigDict(extra="forbid")

    status: RequestStatus
    work_note: WorkNoteCreate | None = None


class PartCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=200)
    part_number: str | None = Field(None, max_length=100)
    quantity: int = Field(..., ge=1)
    unit_cost: float = Field(0, ge=0)
    supplier: str | None = Field(None, max_length=200)


class PartsAddRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    parts: list[PartCreate] = Field(..., min_length=1)


class FeedbackCreate(BaseModel):
    """완료 후 요청자 피드백 (Requester feedback after completion)."""

    model_config = ConfigDict(extra="forbid")

    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=500)
