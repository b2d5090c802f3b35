"""작업장 Pydantic 스키마.

Workshop request schemas.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gearguard.utils.constants import WorkshopStatus


class WorkshopLocation(BaseModel):
    address: str | None = Field(None, max_length=200)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, max_length=100)


class WorkshopCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=10)
    description: str | None = Field(None, max_length=500)
    location: WorkshopLocation | None = None
    specializations: list[str] = []

    @field_validator("code")
    @classmethod
    def _upper_code(cls, v: str) -> str:
        return v.strip().upper()


class WorkshopUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    location: WorkshopLocation | None = None
    status: WorkshopStatus | None = None
    specializations: list[str] | None = None

    @field_validator("name", "status", "specializations")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v
