"""사용자 관련 Pydantic 요청 스키마 정의.

User Pydantic request schema definitions (admin user management).
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from gearguard.utils.constants import UserRole, UserStatus


def _clean_skills(skills: list[str] | None) -> list[str] | None:
    if skills is None:
        return None
    # 공백 제거 및 중복 제거, 순서 유지 (Trim and de-duplicate, keeping order)
    return list(dict.fromkeys(s.strip() for s in skills if s and s.strip()))


class UserCreate(BaseModel):
    """사용자 생성 요청 스키마 (관리자용).

    Attributes:
        full_name: 실명 (Full display name)
        email: 이메일 (Login e-mail, unique)
        password: 비밀번호 (Plain text, will be bcrypt-hashed)
        role: 역할 (admin | technician | employee)
        workshop_id: 소속 작업장 (Home workshop)
        skills: 기술 목록 (Skills, matched against equipment categories)
    """

    model_config = ConfigDict(extra="forbid")

    full_name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: UserRole = "employee"
    status: UserStatus = "active"
    workshop_id: UUID | None = None
    skills: list[str] = []
    phone: str | None = Field(None, max_length=30)
    department: str | None = Field(None, max_length=100)

    @field_validator("skills")
    @classmethod
    def _normalize_skills(cls, v: list[str]) -> list[str]:
        return _clean_skills(v) or []


class UserUpdate(BaseModel):
    """사용자 수정 요청 스키마 (부분 업데이트).

    Only provided fields are updated; unknown fields are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(None, min_length=2, max_length=100)
    role: UserRole | None = None
    status: UserStatus | None = None
    workshop_id: UUID | None = None
    skills: list[str] | None = None
    phone: str | None = Field(None, max_length=30)
    department: str | None = Field(None, max_length=100)

    @field_validator("skills")
    @classmethod
    def _normalize_skills(cls, v: list[str] | None) -> list[str] | None:
        return _clean_skills(v)

    @field_validator("full_name", "role", "status")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


class WorkloadUpdate(BaseModel):
    """작업량 수동 보정 (Manual workload correction)."""

    model_config = ConfigDict(extra="forbid")

    workload: int = Field(ge=0, le=50)
