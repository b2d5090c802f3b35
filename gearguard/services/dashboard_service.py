"""대시보드 서비스 (정비 요청 집계 비즈니스 로직).

Dashboard Service. Role-scoped rollups over maintenance requests:
counts by status/priority/type, overdue count, average resolution time,
overdue and recent lists, calendar events, technician workload and
alerts.
"""

import logging
from collections import defaultdict
from datetime import datetime
from statistics import fmean

from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.config import settings
from gearguard.models.maintenance import MaintenanceRequest
from gearguard.models.types import utcnow
from gearguard.models.user import User
from gearguard.repositories.equipment_repository import equipment_repository
from gearguard.repositories.maintenance_repository import RequestFilter, maintenance_repository
from gearguard.repositories.user_repository import user_repository
from gearguard.services.maintenance_service import maintenance_service
from gearguard.utils.constants import (
    MAINTENANCE_TYPES,
    PRIORITIES,
    PRIORITY_COLORS,
    REQUEST_STATUSES,
    TERMINAL_STATUSES,
)
from gearguard.utils.exceptions import BadRequestError, ForbiddenError

logger = logging.getLogger(__name__)


def average_resolution_hours(spans: list[tuple[datetime, datetime]]) -> float | None:
    """평균 해결 시간: Mean (completed_at - created_at) in hours, None when empty."""
    if not spans:
        return None
    return round(fmean((done - created).total_seconds() / 3600 for created, done in spans), 2)


def _with_zeros(keys: tuple[str, ...], counts: dict[str, int]) -> dict[str, int]:
    """모든 분류 값을 0으로 채운 집계 (Every known key present, unknown keys kept)."""
    return {**{k: 0 for k in keys}, **counts}


class DashboardService:
    """대시보드 서비스.

    Dashboard aggregation service. Every query is narrowed to what the
    calling user may see before aggregating.
    """

    async def get_stats(self, db: AsyncSession, user: User, f: RequestFilter) -> dict:
        """정비 요청 통계를 집계합니다.

        Aggregate request statistics under the caller's visibility scope.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user: 요청 사용자 (Caller, determines the scope)
            f: 필터 (workshop/team/technician/date range filters)

        Returns:
            dict: total, open, by_status, by_priority, by_type, overdue,
                sla_breached, avg_resolution_hours
        """
        if f.created_from and f.created_to and f.created_from >= f.created_to:
            raise BadRequestError("날짜 범위가 올바르지 않습니다 (Invalid date range)", code="INVALID_DATE_RANGE")

        f = await maintenance_service.scope_filter(db, user, f)
        now = utcnow()

        by_status = _with_zeros(REQUEST_STATUSES, await maintenance_repository.count_by(db, MaintenanceRequest.status, f))
        by_priority = _with_zeros(PRIORITIES, await maintenance_repository.count_by(db, MaintenanceRequest.priority, f))
        by_type = _with_zeros(MAINTENANCE_TYPES, await maintenance_repository.count_by(db, MaintenanceRequest.type, f))
        breached = await maintenance_repository.count_by(db, MaintenanceRequest.sla_breached, f)
        spans = await maintenance_repository.get_completion_spans(db, f)

        total: int = sum(by_status.values())
        return {
            "total": total,
            "open": sum(c for s, c in by_status.items() if s not in TERMINAL_STATUSES),
            "by_status": by_status,
            "by_priority": by_priority,
            "by_type": by_type,
            "overdue": await maintenance_repository.count_overdue(db, f, now),
            "sla_breached": breached.get(True, 0),
            "avg_resolution_hours": average_resolution_hours(spans),
            "generated_at": now,
        }

    async def get_overdue(self, db: AsyncSession, user: User, f: RequestFilter, limit: int = 50) -> list[dict]:
        """기한 초과 요청 목록 (Overdue requests, earliest due date first)."""
        f = await maintenance_service.scope_filter(db, user, f)
        now = utcnow()
        requests = await maintenance_repository.list_overdue(db, f, now, limit)
        return [maintenance_service.build_response(r, now) for r in requests]

    async def get_recent(self, db: AsyncSession, user: User, limit: int = 5) -> list[dict]:
        f = await maintenance_service.scope_filter(db, user, RequestFilter())
        requests = await maintenance_repository.list_recent(db, f, limit)
        return [maintenance_service.build_response(r) for r in requests]

    async def get_calendar(
        self,
        db: AsyncSession,
        user: User,
        start: datetime,
        end: datetime,
        f: RequestFilter,
    ) -> list[dict]:
        """캘린더 이벤트: Requests scheduled or due within [start, end).

        Each event starts at the scheduled date (falling back to the due date)
        and is coloured by priority.
        """
        if start >= end:
            raise BadRequestError("날짜 범위가 올바르지 않습니다 (Invalid date range)", code="INVALID_DATE_RANGE")

        f = await maintenance_service.scope_filter(db, user, f)
        requests = await maintenance_repository.list_in_window(db, f, start, end)
        return [
            {
                "id": str(r.id),
                "title": f"{r.request_number}: {r.title}",
                "start": r.scheduled_date or r.due_date,
                "end": r.due_date,
                "status": r.status,
                "priority": r.priority,
                "type": r.type,
                "color": PRIORITY_COLORS.get(r.priority, "#6b7280"),
                "assigned_technician_id": str(r.assigned_technician_id) if r.assigned_technician_id else None,
            }
            for r in requests
        ]

    async def get_technician_workload(self, db: AsyncSession, user: User) -> dict:
        """기술자 작업량 현황.

        Active technicians, busiest first, each with the open requests that
        make up the counter. Admins see everyone; team leads see the members
        of the teams they lead.

        Raises:
            ForbiddenError: 관리자/팀장이 아닌 경우 (Neither admin nor team lead)
        """
        team_ids: list | None = None
        if user.role != "admin":
            team_ids = await user_repository.get_led_team_ids(db, user.id)
            if not team_ids:
                raise ForbiddenError(
                    "관리자 또는 팀장만 조회할 수 있습니다 (Only admins and team leads can view workload data)",
                    code="WORKLOAD_ACCESS_DENIED",
                )

        technicians = await user_repository.list_technicians_by_workload(db, team_ids)
        open_requests = await maintenance_repository.list_open_for_technicians(db, [t.id for t in technicians])
        by_technician: dict = defaultdict(list)
        for r in open_requests:
            by_technician[r.assigned_technician_id].append(
                {
                    "id": str(r.id),
                    "request_number": r.request_number,
                    "title": r.title,
                    "equipment_id": str(r.equipment_id),
                    "priority": r.priority,
                    "status": r.status,
                    "due_date": r.due_date,
                }
            )

        threshold: int = settings.TECHNICIAN_OVERLOAD_THRESHOLD
        rows = [
            {
                "id": str(t.id),
                "full_name": t.full_name,
                "email": t.email,
                "workload": t.workload,
                "overloaded": t.workload > threshold,
                "active_assignments": len(by_technician[t.id]),
                "assignments": by_technician[t.id],
            }
            for t in technicians
        ]
        return {
            "technicians": rows,
            "summary": {
                "total_technicians": len(rows),
                "average_workload": round(fmean(t.workload for t in technicians), 2) if technicians else 0.0,
                "overloaded": sum(1 for row in rows if row["overloaded"]),
            },
        }

    async def get_alerts(self, db: AsyncSession, user: User) -> list[dict]:
        """역할별 경고 목록.

        Staff get overdue requests (in their scope) and critical equipment
        needing attention; admins additionally get unassigned requests and
        overloaded technicians. Alerts with a zero count are omitted.
        """
        if user.role not in ("admin", "technician"):
            return []

        alerts: list[dict] = []

        def _alert(kind: str, category: str, title: str, message: str, count: int) -> None:
            if count > 0:
                alerts.append(
                    {"type": kind, "category": category, "title": title, "message": message, "count": count}
                )

        f = await maintenance_service.scope_filter(db, user, RequestFilter())
        overdue = await maintenance_repository.count_overdue(db, f, utcnow())
        _alert("error", "overdue", "Overdue Maintenance Requests", f"{overdue} maintenance requests are overdue", overdue)

        critical = await equipment_repository.count_critical_attention(db)
        _alert(
            "error", "critical", "Critical Equipment Issues",
            f"{critical} critical equipment items need attention", critical,
        )

        if user.role == "admin":
            unassigned = await maintenance_repository.count_unassigned(db)
            _alert(
                "info", "assignment", "Unassigned Requests",
                f"{unassigned} maintenance requests need technician assignment", unassigned,
            )
            overloaded = await user_repository.count_overloaded(db, settings.TECHNICIAN_OVERLOAD_THRESHOLD)
            _alert(
                "warning", "workload", "Overloaded Technicians",
                f"{overloaded} technicians have high workloads", overloaded,
            )
        return alerts


dashboard_service: DashboardService = DashboardService()
