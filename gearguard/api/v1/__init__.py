"""v1 API 라우터 패키지 (모든 엔드포인트 통합).

v1 API Router package: Aggregates every endpoint group into one router
mounted under /api/v1.

Included routers:
    - auth: 인증 (Login, profile, password)
    - users: 사용자 관리 및 기술자 디렉터리 (Users and technician directory)
    - workshops: 작업장 (Workshops)
    - teams: 팀 및 구성원 (Teams and membership)
    - equipment: 설비 (Equipment registry)
    - maintenance-requests: 정비 요청 수명 주기 (Maintenance request lifecycle)
    - dashboard: 통계 (Statistics)
    - notifications: 알림 (In-app notifications)
"""

from fastapi import APIRouter

from gearguard.api.v1.auth import router as auth_router
from gearguard.api.v1.dashboard import router as dashboard_router
from gearguard.api.v1.equipment import router as equipment_router
from gearguard.api.v1.maintenance import router as maintenance_router
from gearguard.api.v1.notifications import router as notifications_router
from gearguard.api.v1.teams import router as teams_router
from gearguard.api.v1.users import router as users_router
from gearguard.api.v1.workshops import router as workshops_router

api_router: APIRouter = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(workshops_router, prefix="/workshops", tags=["Workshops"])
api_router.include_router(teams_router, prefix="/teams", tags=["Teams"])
api_router.include_router(equipment_router, prefix="/equipment", tags=["Equipment"])
api_router.include_router(maintenance_router, prefix="/maintenance-requests", tags=["Maintenance Requests"])
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
