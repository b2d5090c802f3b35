"""정비 요청 서비스 (정비 요청 수명 주기 비즈니스 로직).

Maintenance Request Service: Creation and numbering, SLA computation,
status transitions, the work-note/parts ledger and requester feedback.
Assignment lives in assignment_service; rollups in dashboard_service.

Status Transition Rules:
    - → In Progress: actual_start_date 최초 1회 기록 (Stamped once)
    - → Completed: actual_end_date(미설정 시), completed_at 기록,
      담당 기술자 작업량 -1 (0 미만 불가)
    - Completed / Cancelled / Rejected 이후 전이 불가 (Terminal statuses are final)
    - 담당 기술자 또는 관리자만 전이 가능 (Assigned technician or admin only)
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.config import settings
from gearguard.models.maintenance import MaintenanceRequest, PartUsage, WorkNote
from gearguard.models.types import utcnow
from gearguard.models.user import User
from gearguard.repositories.equipment_repository import equipment_repository
from gearguard.repositories.maintenance_repository import RequestFilter, maintenance_repository
from gearguard.repositories.user_repository import user_repository
from gearguard.schemas.maintenance import (
    FeedbackCreate,
    MaintenanceRequestCreate,
    MaintenanceRequestUpdate,
    PartsAddRequest,
    StatusUpdate,
    WorkNoteCreate,
)
from gearguard.services.notification_service import notification_service
from gearguard.utils.constants import EQUIPMENT_TO_REQUEST_CATEGORY, TERMINAL_STATUSES
from gearguard.utils.exceptions import (
    BadRequestError,
    CreationFailedError,
    DuplicateError,
    ForbiddenError,
    NotFoundError,
)
from gearguard.utils.sla import (
    age_in_days,
    compute_due_date,
    compute_sla,
    duration_minutes,
    is_overdue,
)

logger = logging.getLogger(__name__)

# 권한 오류는 원인을 구분하지 않음 (One message for every access denial)
ACCESS_DENIED_MESSAGE = "이 정비 요청에 대한 권한이 없습니다 (Access denied for this maintenance request)"
ACCESS_DENIED_CODE = "REQUEST_ACCESS_DENIED"


def calculate_parts_cost(parts: Iterable[Any]) -> float:
    """부품 비용 합계 (Σ quantity × unit_cost over parts-used entries)."""
    return float(sum(p.quantity * p.unit_cost for p in parts))


def _access_denied() -> ForbiddenError:
    return ForbiddenError(ACCESS_DENIED_MESSAGE, code=ACCESS_DENIED_CODE)


class MaintenanceService:
    """정비 요청 수명 주기를 처리하는 서비스.

    Service owning the maintenance request lifecycle.
    """

    # --- 응답 (Responses) ---

    def _note_response(self, note: WorkNote) -> dict:
        return {
            "id": str(note.id),
            "technician_id": str(note.technician_id),
            "note": note.note,
            "hours_worked": note.hours_worked,
            "attachments": list(note.attachments or []),
            "timestamp": note.timestamp,
        }

    def _part_response(self, part: PartUsage) -> dict:
        return {
            "id": str(part.id),
            "name": part.name,
            "part_number": part.part_number,
            "quantity": part.quantity,
            "unit_cost": part.unit_cost,
            "supplier": part.supplier,
            "requested_by": str(part.requested_by),
            "requested_at": part.requested_at,
        }

    def build_response(self, request: MaintenanceRequest, now: datetime | None = None) -> dict:
        """정비 요청 응답 (저장 필드와 파생 값을 함께 반환합니다).

        Build the response body: stored fields plus derived values
        (total cost, total hours, duration, age, overdue flag).

        Args:
            request: 정비 요청 (Request with ledgers loaded)
            now: 기준 시각 (Reference time for age/overdue, default now)

        Returns:
            dict: 응답 딕셔너리 (Response body)
        """
        now = now or utcnow()
        notes: list[WorkNote] = list(request.work_notes)
        parts: list[PartUsage] = list(request.parts_used)
        return {
            "id": str(request.id),
            "request_number": request.request_number,
            "title": request.title,
            "description": request.description,
            "type": request.type,
            "category": request.category,
            "equipment_id": str(request.equipment_id),
            "location": request.location,
            "priority": request.priority,
            "urgency": request.urgency,
            "impact": request.impact,
            "status": request.status,
            "created_by": str(request.created_by),
            "assigned_technician_id": str(request.assigned_technician_id) if request.assigned_technician_id else None,
            "assigned_team_id": str(request.assigned_team_id) if request.assigned_team_id else None,
            "scheduled_date": request.scheduled_date,
            "due_date": request.due_date,
            "estimated_duration": request.estimated_duration,
            "actual_start_date": request.actual_start_date,
            "actual_end_date": request.actual_end_date,
            "completed_at": request.completed_at,
            "cost": {
                "labor": request.cost_labor,
                "parts": request.cost_parts,
                "external": request.cost_external,
            },
            "sla": {
                "response_hours": request.sla_response_hours,
                "resolution_hours": request.sla_resolution_hours,
                "response_deadline": request.response_deadline,
                "resolution_deadline": request.resolution_deadline,
                "is_breached": request.sla_breached,
            },
            "tags": list(request.tags or []),
            "feedback": (
                {
                    "rating": request.feedback_rating,
                    "comment": request.feedback_comment,
                    "submitted_by": str(request.feedback_submitted_by) if request.feedback_submitted_by else None,
                    "submitted_at": request.feedback_submitted_at,
                }
                if request.feedback_rating is not None
                else None
            ),
            "work_notes": [self._note_response(n) for n in notes],
            "parts_used": [self._part_response(p) for p in parts],
            # 파생 값 (Derived values)
            "total_cost": request.cost_labor + request.cost_parts + request.cost_external,
            "total_hours_worked": float(sum(n.hours_worked for n in notes)),
            "duration_minutes": duration_minutes(request.actual_start_date, request.actual_end_date),
            "age_in_days": age_in_days(request.created_at, now),
            "is_overdue": is_overdue(request.status, request.due_date, now),
            "created_at": request.created_at,
            "updated_at": request.updated_at,
        }

    # --- 권한 (Access) ---

    async def can_view(self, db: AsyncSession, user: User, request: MaintenanceRequest) -> bool:
        """조회 권한 (관리자, 요청자, 담당 기술자, 담당 팀 소속 기술자)."""
        if user.role == "admin":
            return True
        if request.created_by == user.id or request.assigned_technician_id == user.id:
            return True
        if user.role == "technician" and request.assigned_team_id is not None:
            return request.assigned_team_id in await user_repository.get_team_ids(db, user.id)
        return False

    def ensure_can_work(self, user: User, request: MaintenanceRequest) -> None:
        """작업 권한: 관리자 또는 담당 기술자만 (Admin or assigned technician only)."""
        if user.role == "admin":
            return
        if user.role == "technician" and request.assigned_technician_id == user.id:
            return
        raise _access_denied()

    async def get_request(self, db: AsyncSession, request_id: UUID) -> MaintenanceRequest:
        request = await maintenance_repository.get_by_id(db, request_id)
        if request is None:
            raise NotFoundError("정비 요청을 찾을 수 없습니다 (Maintenance request not found)", code="REQUEST_NOT_FOUND")
        return request

    async def get_visible_request(self, db: AsyncSession, request_id: UUID, user: User) -> MaintenanceRequest:
        request = await self.get_request(db, request_id)
        if not await self.can_view(db, user, request):
            raise _access_denied()
        return request

    async def scope_filter(self, db: AsyncSession, user: User, f: RequestFilter) -> RequestFilter:
        """역할별 조회 범위를 필터에 적용합니다.

        Narrow a filter to what the user may see:
            - admin: 전체 (everything)
            - technician: 본인 또는 소속 팀에 배정된 요청 (assigned to them or their teams)
            - employee: 본인이 생성한 요청 (requests they created)
        Non-admin users are additionally pinned to their own workshop.
        """
        if user.role == "admin":
            return f
        if user.workshop_id is not None:
            f.workshop_id = user.workshop_id
        if user.role == "technician":
            f.scope_technician_id = user.id
            f.scope_team_ids = await user_repository.get_team_ids(db, user.id)
        else:
            f.scope_creator_id = user.id
        return f

    # --- 조회 (Queries) ---

    async def list_requests(
        self,
        db: AsyncSession,
        user: User,
        f: RequestFilter,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[MaintenanceRequest], int]:
        f = await self.scope_filter(db, user, f)
        return await maintenance_repository.list_requests(db, f, page, per_page)

    # --- 생성 (Creation) ---

    async def create_request(
        self,
        db: AsyncSession,
        data: MaintenanceRequestCreate,
        user: User,
    ) -> MaintenanceRequest:
        """정비 요청을 생성합니다.

        Create a maintenance request: allocate the request number, compute SLA
        deadlines and the due date, and inherit location/team from the
        equipment. A request-number collision rolls the unit of work back and
        retries with a fresh number, up to REQUEST_NUMBER_MAX_RETRIES times.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 생성 요청 (Validated creation payload)
            user: 요청자 (Creator)

        Returns:
            MaintenanceRequest: 생성된 요청 (The created request)

        Raises:
            NotFoundError: 설비 없음 (Equipment not found)
            BadRequestError: 비활성 설비 (Equipment is deactivated)
            CreationFailedError: 번호 충돌 재시도 소진 (Numbering retries exhausted)
        """
        equipment = await equipment_repository.get_by_id(db, data.equipment_id)
        if equipment is None:
            raise NotFoundError("설비를 찾을 수 없습니다 (Equipment not found)", code="EQUIPMENT_NOT_FOUND")
        if not equipment.is_active:
            raise BadRequestError("비활성화된 설비입니다 (Equipment is deactivated)", code="EQUIPMENT_INACTIVE")

        # 롤백 시 ORM 객체가 만료되므로 값을 먼저 캡처 (Rollback expires ORM state; capture plain values)
        creator_id: UUID = user.id
        equipment_location: dict = dict(equipment.location or {})
        values: dict[str, Any] = {
            "title": data.title,
            "description": data.description,
            "type": data.type,
            "category": data.category or EQUIPMENT_TO_REQUEST_CATEGORY.get(equipment.category, "Other"),
            "equipment_id": equipment.id,
            "location": (
                data.location.model_dump()
                if data.location is not None
                else {
                    "building": equipment_location.get("building"),
                    "floor": equipment_location.get("floor"),
                    "room": equipment_location.get("room"),
                    "specific_location": equipment_location.get("zone"),
                }
            ),
            "priority": data.priority,
            "urgency": data.urgency,
            "impact": data.impact,
            "created_by": creator_id,
            "assigned_team_id": equipment.assigned_team_id,
            "status": "New",
            "scheduled_date": data.scheduled_date,
            "estimated_duration": data.estimated_duration,
            "tags": data.tags,
        }

        max_attempts: int = max(settings.REQUEST_NUMBER_MAX_RETRIES, 1)
        for attempt in range(1, max_attempts + 1):
            now = utcnow()
            try:
                number = await maintenance_repository.next_request_number(db, now)
                request = MaintenanceRequest(
                    **values,
                    request_number=number,
                    due_date=compute_due_date(data.priority, now, data.scheduled_date, data.due_date),
                    created_at=now,
                    updated_at=now,
                    **compute_sla(data.priority, now).as_fields(),
                )
                db.add(request)
                await db.flush()
            except IntegrityError:
                await db.rollback()
                logger.warning(
                    "Request number collision (attempt %d/%d), retrying", attempt, max_attempts
                )
                continue

            await db.refresh(request)
            logger.info("Created maintenance request %s by %s", request.request_number, creator_id)
            return request

        logger.error("Giving up on request creation after %d numbering attempts", max_attempts)
        raise CreationFailedError()

    # --- 수정 (Update) ---

    async def update_request(
        self,
        db: AsyncSession,
        request_id: UUID,
        data: MaintenanceRequestUpdate,
        user: User,
    ) -> MaintenanceRequest:
        """요청자 또는 관리자가 요청 내용을 수정합니다.

        Update descriptive fields. A priority change recomputes both SLA
        deadlines from the time of the change.
        """
        request = await self.get_request(db, request_id)
        if user.role != "admin" and request.created_by != user.id:
            raise _access_denied()
        if request.status in TERMINAL_STATUSES:
            raise BadRequestError("종료된 정비 요청입니다 (Maintenance request is closed)", code="REQUEST_CLOSED")

        update_data = data.model_dump(exclude_unset=True)
        if "location" in update_data:
            update_data["location"] = data.location.model_dump() if data.location else None

        new_priority = update_data.get("priority")
        if new_priority is not None and new_priority != request.priority:
            update_data.update(compute_sla(new_priority, utcnow()).as_fields())
            logger.info(
                "Priority of %s changed %s -> %s, SLA recomputed",
                request.request_number, request.priority, new_priority,
            )

        for field, value in update_data.items():
            setattr(request, field, value)
        await db.flush()
        await db.refresh(request)
        return request

    # --- 상태 전이 (Status transitions) ---

    async def change_status(
        self,
        db: AsyncSession,
        request_id: UUID,
        data: StatusUpdate,
        user: User,
    ) -> MaintenanceRequest:
        """정비 요청 상태를 변경합니다.

        Drive a status transition and its timestamp/workload side effects.
        An optional work note is appended in the same unit of work.

        Raises:
            NotFoundError: 요청 없음 (Request not found)
            ForbiddenError: 담당 기술자/관리자 아님 (Not the assigned technician or an admin)
            BadRequestError: 종료 상태에서의 전이 (Transition out of a terminal status)
        """
        request = await self.get_request(db, request_id)
        self.ensure_can_work(user, request)

        previous: str = request.status
        if previous in TERMINAL_STATUSES:
            raise BadRequestError(
                f"종료 상태에서는 변경할 수 없습니다 (Cannot transition from {previous})",
                code="INVALID_TRANSITION",
            )

        now = utcnow()
        target: str = data.status
        if target == "In Progress" and request.actual_start_date is None:
            request.actual_start_date = now
        if target == "Completed":
            if request.actual_end_date is None:
                request.actual_end_date = now
            request.completed_at = now
            if request.resolution_deadline is not None and now > request.resolution_deadline:
                request.sla_breached = True
            if request.assigned_technician_id is not None:
                await user_repository.decrement_workload(db, request.assigned_technician_id)
        request.status = target

        if data.work_note is not None:
            await maintenance_repository.add_work_note(db, request, self._note_values(data.work_note, user.id))

        await db.flush()
        if target != previous:
            await notification_service.notify_status_change(db, request, user.id)
        logger.info("%s: %s -> %s by %s", request.request_number, previous, target, user.id)
        await db.refresh(request)
        return request

    # --- 작업 기록/부품 (Ledger) ---

    def _note_values(self, data: WorkNoteCreate, technician_id: UUID) -> dict[str, Any]:
        return {
            "technician_id": technician_id,
            "note": data.note.strip(),
            "hours_worked": data.hours_worked,
            "attachments": [a.model_dump() for a in data.attachments],
            "timestamp": utcnow(),
        }

    async def add_work_note(
        self,
        db: AsyncSession,
        request_id: UUID,
        data: WorkNoteCreate,
        user: User,
    ) -> MaintenanceRequest:
        """작업 기록을 추가합니다 (다른 필드는 변경하지 않음)."""
        request = await self.get_request(db, request_id)
        self.ensure_can_work(user, request)
        await maintenance_repository.add_work_note(db, request, self._note_values(data, user.id))
        return request

    async def add_parts(
        self,
        db: AsyncSession,
        request_id: UUID,
        data: PartsAddRequest,
        user: User,
    ) -> MaintenanceRequest:
        """사용 부품을 추가하고 부품 비용을 다시 계산합니다.

        Append parts to the ledger and recompute cost_parts from the stored
        ledger in the same unit of work.
        """
        request = await self.get_request(db, request_id)
        self.ensure_can_work(user, request)

        now = utcnow()
        await maintenance_repository.add_parts(
            db,
            request,
            [{**p.model_dump(), "requested_by": user.id, "requested_at": now} for p in data.parts],
        )
        request.cost_parts = await maintenance_repository.sum_parts_cost(db, request.id)
        await db.flush()
        logger.info("Added %d part(s) to %s, parts cost %.2f", len(data.parts), request.request_number, request.cost_parts)
        await db.refresh(request)
        return request

    # --- 피드백 (Feedback) ---

    async def submit_feedback(
        self,
        db: AsyncSession,
        request_id: UUID,
        data: FeedbackCreate,
        user: User,
    ) -> MaintenanceRequest:
        request = await self.get_request(db, request_id)
        if request.created_by != user.id:
            raise _access_denied()
        if request.status != "Completed":
            raise BadRequestError(
                "완료된 요청에만 피드백을 남길 수 있습니다 (Feedback requires a completed request)",
                code="REQUEST_NOT_COMPLETED",
            )
        if request.feedback_rating is not None:
            raise DuplicateError("이미 피드백을 제출했습니다 (Feedback already submitted)", code="FEEDBACK_EXISTS")

        request.feedback_rating = data.rating
        request.feedback_comment = data.comment
        request.feedback_submitted_by = user.id
        request.feedback_submitted_at = utcnow()
        await db.flush()
        await db.refresh(request)
        return request


maintenance_service: MaintenanceService = MaintenanceService()
