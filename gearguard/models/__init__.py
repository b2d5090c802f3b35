"""SQLAlchemy ORM 모델 패키지 (모든 도메인 모델의 중앙 임포트 지점).

SQLAlchemy ORM models package (Central import point for all domain models).
Importing from this package registers every model with the metadata,
which Alembic and relationship resolution rely on.

Modules:
    workshop: 작업장 (Workshop)
    user: 사용자 (User)
    team: 팀 및 구성원 (Team, TeamMember)
    equipment: 설비 (Equipment)
    maintenance: 정비 요청, 작업 기록, 부품, 번호 카운터
                 (MaintenanceRequest, WorkNote, PartUsage, RequestNumberSequence)
    notification: 알림 (Notification)
    rate_limit: 속도 제한 기록 (RateLimitHit)
"""

from gearguard.models.workshop import Workshop
from gearguard.models.user import User
from gearguard.models.team import Team, TeamMember
from gearguard.models.equipment import Equipment
from gearguard.models.maintenance import MaintenanceRequest, WorkNote, PartUsage, RequestNumberSequence
from gearguard.models.notification import Notification
from gearguard.models.rate_limit import RateLimitHit

__all__ = [
    "Workshop",
    "User",
    "Team", "TeamMember",
    "Equipment",
    "MaintenanceRequest", "WorkNote", "PartUsage", "RequestNumberSequence",
    "Notification",
    "RateLimitHit",
]
