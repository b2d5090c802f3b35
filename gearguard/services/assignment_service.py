"""정비 배정 서비스 (기술자/팀 배정 비즈니스 로직).

Assignment Service (Manual and automatic assignment of maintenance requests).
All references are validated before anything is mutated, the technician
workload counter follows the assignment, and the assigned technician is
notified without waiting for e-mail delivery.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.maintenance import MaintenanceRequest
from gearguard.models.team import Team
from gearguard.models.user import User
from gearguard.repositories.equipment_repository import equipment_repository
from gearguard.repositories.team_repository import team_repository
from gearguard.repositories.user_repository import user_repository
from gearguard.schemas.maintenance import AssignRequest
from gearguard.services.maintenance_service import maintenance_service
from gearguard.services.notification_service import notification_service
from gearguard.utils.constants import TERMINAL_STATUSES
from gearguard.utils.exceptions import BadRequestError

logger = logging.getLogger(__name__)


class AssignmentService:
    """정비 요청 배정 서비스.

    Assignment service for maintenance requests.
    """

    def _ensure_open(self, request: MaintenanceRequest) -> None:
        if request.status in TERMINAL_STATUSES:
            raise BadRequestError(
                "종료된 요청은 배정할 수 없습니다 (Cannot assign a closed request)",
                code="REQUEST_CLOSED",
            )

    async def _resolve_technician(self, db: AsyncSession, technician_id: UUID) -> User:
        """기술자 참조를 검증합니다 (존재하고 technician 역할이어야 함)."""
        technician = await user_repository.get_by_id(db, technician_id)
        if technician is None or technician.role != "technician":
            raise BadRequestError("유효하지 않은 기술자입니다 (Invalid technician)", code="INVALID_TECHNICIAN")
        return technician

    async def _resolve_team(self, db: AsyncSession, team_id: UUID) -> Team:
        team = await team_repository.get_by_id(db, team_id)
        if team is None:
            raise BadRequestError("유효하지 않은 팀입니다 (Invalid team)", code="INVALID_TEAM")
        return team

    async def _apply(
        self,
        db: AsyncSession,
        request: MaintenanceRequest,
        technician: User | None,
        team: Team | None,
        actor_id: UUID,
        equipment_name: str | None = None,
    ) -> MaintenanceRequest:
        """검증된 배정을 요청에 반영합니다.

        Apply an already validated assignment.

        Workload rules:
            - 새 기술자 +1 (New technician +1)
            - 교체된 기술자 -1, 0 미만 불가 (Replaced technician -1, floored at 0)
            - 같은 기술자 재배정은 변화 없음 (Re-assigning the same technician is a no-op)

        A New request moves to Assigned; any later status is kept as is.
        """
        previous_id: UUID | None = request.assigned_technician_id
        changed: bool = technician is not None and technician.id != previous_id

        if changed:
            request.assigned_technician_id = technician.id
            await user_repository.increment_workload(db, technician.id)
            if previous_id is not None:
                await user_repository.decrement_workload(db, previous_id)
        if team is not None:
            request.assigned_team_id = team.id
        if request.status == "New":
            request.status = "Assigned"
        await db.flush()

        if changed:
            await notification_service.notify_assignment(db, technician, request, equipment_name)
        logger.info(
            "Assigned %s to technician=%s team=%s by %s",
            request.request_number, request.assigned_technician_id, request.assigned_team_id, actor_id,
        )
        await db.refresh(request)
        return request

    async def assign(
        self,
        db: AsyncSession,
        request_id: UUID,
        data: AssignRequest,
        actor: User,
    ) -> MaintenanceRequest:
        """기술자 및/또는 팀을 배정합니다.

        Assign a technician and/or a team. Every reference is validated first,
        so a failed call leaves the request untouched.

        Raises:
            NotFoundError: 요청 없음 (Request not found)
            BadRequestError: INVALID_TECHNICIAN / INVALID_TEAM / REQUEST_CLOSED
        """
        request = await maintenance_service.get_request(db, request_id)
        technician = await self._resolve_technician(db, data.technician_id) if data.technician_id else None
        team = await self._resolve_team(db, data.team_id) if data.team_id else None
        self._ensure_open(request)

        equipment = await equipment_repository.get_by_id(db, request.equipment_id)
        return await self._apply(
            db, request, technician, team, actor.id, equipment.name if equipment else None
        )

    async def auto_assign(self, db: AsyncSession, request_id: UUID, actor: User) -> MaintenanceRequest:
        """작업량이 가장 적은 적격 기술자를 자동 배정합니다.

        Pick the active technician with the lowest workload whose skills
        include the equipment's category, and assign them.

        Raises:
            BadRequestError: NO_AVAILABLE_TECHNICIANS (적격 기술자 없음)
        """
        request = await maintenance_service.get_request(db, request_id)
        self._ensure_open(request)

        equipment = await equipment_repository.get_by_id(db, request.equipment_id)
        skill: str | None = equipment.category if equipment else None
        candidates = await user_repository.find_available_technicians(db, skill=skill)
        if not candidates:
            logger.info("No technician available for %s (skill=%s)", request.request_number, skill)
            raise BadRequestError(
                "배정 가능한 기술자가 없습니다 (No available technicians)",
                code="NO_AVAILABLE_TECHNICIANS",
            )

        chosen: User = candidates[0]
        logger.info(
            "Auto-assigning %s to %s (workload %d)", request.request_number, chosen.id, chosen.workload
        )
        return await self._apply(
            db, request, chosen, None, actor.id, equipment.name if equipment else None
        )


assignment_service: AssignmentService = AssignmentService()
