"""팀 Pydantic 스키마.

Team and team membership request schemas.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gearguard.utils.constants import TeamMemberRole, TeamStatus


class TeamCreate(BaseModel):
    """팀 생성 요청 스키마.

    Attributes:
        name: 팀 이름 (Team name)
        workshop_id: 소속 작업장 (Parent workshop)
        team_lead_id: 팀장 (Team lead; added as a "lead" member)
        max_capacity: 최대 인원 (Maximum active members, 1..50)
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    workshop_id: UUID
    description: str | None = Field(None, max_length=500)
    specialization: list[str] = []
    team_lead_id: UUID | None = None
    max_capacity: int = Field(10, ge=1, le=50)


class TeamUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    specialization: list[str] | None = None
    team_lead_id: UUID | None = None
    status: TeamStatus | None = None
    max_capacity: int | None = Field(None, ge=1, le=50)

    @field_validator("name", "specialization", "status", "max_capacity")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


class TeamMemberAdd(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: UUID
    member_role: TeamMemberRole = "junior"
