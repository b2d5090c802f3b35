"""SLA 및 일정 계산 유틸리티.

SLA and schedule calculation helpers for maintenance requests.
All functions are pure and take the reference time explicitly.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from gearguard.utils.constants import TERMINAL_STATUSES

# 우선순위별 SLA 목표 (응답 시간, 해결 시간): (response hours, resolution hours)
SLA_HOURS: dict[str, tuple[float, float]] = {
    "Emergency": (0.5, 4),
    "Critical": (2, 8),
    "High": (4, 24),
    "Medium": (8, 72),
    "Low": (24, 168),
}

# 우선순위별 기본 마감 시간 (Default due-date offset in hours)
DUE_HOURS: dict[str, float] = {
    "Emergency": 2,
    "Critical": 8,
    "High": 24,
    "Medium": 72,
    "Low": 168,
}


@dataclass(frozen=True)
class SLATargets:
    """우선순위에서 계산된 SLA 목표와 마감 시각."""

    response_hours: float
    resolution_hours: float
    response_deadline: datetime
    resolution_deadline: datetime

    def as_fields(self) -> dict[str, float | datetime]:
        """모델 컬럼명으로 변환 (Map onto MaintenanceRequest column names)."""
        return {
            "sla_response_hours": self.response_hours,
            "sla_resolution_hours": self.resolution_hours,
            "response_deadline": self.response_deadline,
            "resolution_deadline": self.resolution_deadline,
        }


def compute_sla(priority: str, reference: datetime) -> SLATargets:
    """우선순위와 기준 시각으로 SLA 마감 시각을 계산합니다.

    Translate a priority into response/resolution deadlines.

    Args:
        priority: 우선순위 (One of SLA_HOURS keys)
        reference: 기준 시각 (Creation time, or the time priority changed)

    Returns:
        SLATargets: 목표 시간과 마감 시각 (Target hours and deadlines)

    Raises:
        ValueError: 알 수 없는 우선순위 (Unknown priority)
    """
    try:
        response_hours, resolution_hours = SLA_HOURS[priority]
    except KeyError:
        raise ValueError(f"Unknown priority: {priority!r}") from None
    return SLATargets(
        response_hours=float(response_hours),
        resolution_hours=float(resolution_hours),
        response_deadline=reference + timedelta(hours=response_hours),
        resolution_deadline=reference + timedelta(hours=resolution_hours),
    )


def compute_due_date(
    priority: str,
    reference: datetime,
    scheduled_date: datetime | None = None,
    due_date: datetime | None = None,
) -> datetime:
    """마감일을 결정합니다.

    Resolve the due date: an explicit value wins, then the scheduled date,
    then the priority default offset from the reference time.
    """
    if due_date is not None:
        return due_date
    if scheduled_date is not None:
        return scheduled_date
    return reference + timedelta(hours=DUE_HOURS.get(priority, DUE_HOURS["Medium"]))


def is_overdue(status: str, due_date: datetime | None, now: datetime | None = None) -> bool:
    """기한 초과 여부 (True iff not terminal and due_date is in the past)."""
    if due_date is None or status in TERMINAL_STATUSES:
        return False
    now = now or datetime.now(timezone.utc)
    return due_date < now


def duration_minutes(start: datetime | None, end: datetime | None) -> float | None:
    """실제 작업 소요 시간(분) (None until both ends are stamped)."""
    if start is None or end is None:
        return None
    return round((end - start).total_seconds() / 60, 2)


def age_in_days(created_at: datetime, now: datetime | None = None) -> int:
    """요청 경과 일수 (Whole days since creation)."""
    now = now or datetime.now(timezone.utc)
    return max((now - created_at).days, 0)
