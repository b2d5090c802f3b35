"""설비 Pydantic 스키마.

Equipment request schemas.
"""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gearguard.utils.constants import EquipmentCategory, EquipmentStatus, Severity


class EquipmentLocation(BaseModel):
    """설비 위치: building 필수 (Building is required)."""

    building: str = Field(..., min_length=1, max_length=100)
    floor: str | None = Field(None, max_length=20)
    room: str | None = Field(None, max_length=50)
    zone: str | None = Field(None, max_length=50)


class EquipmentCreate(BaseModel):
    """설비 생성 요청 스키마.

    Attributes:
        serial_number: 시리얼 번호 (Unique serial number)
        category: 설비 분류 (Matched against technician skills on auto-assign)
        assigned_team_id: 담당 팀 (Responsible team, required)
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    serial_number: str = Field(..., min_length=1, max_length=100)
    workshop_id: UUID
    category: EquipmentCategory
    manufacturer: str | None = Field(None, max_length=100)
    model: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=1000)
    location: EquipmentLocation
    assigned_team_id: UUID
    primary_technician_id: UUID | None = None
    status: EquipmentStatus = "Active"
    criticality: Severity = "Medium"
    purchase_date: date | None = None
    warranty_expiry: date | None = None


class EquipmentUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=100)
    category: EquipmentCategory | None = None
    manufacturer: str | None = Field(None, max_length=100)
    model: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=1000)
    location: EquipmentLocation | None = None
    assigned_team_id: UUID | None = None
    primary_technician_id: UUID | None = None
    status: EquipmentStatus | None = None
    criticality: Severity | None = None
    purchase_date: date | None = None
    warranty_expiry: date | None = None

    @field_validator("name", "category", "location", "assigned_team_id", "status", "criticality")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v
