"""SLA 및 파생 값 계산 단위 테스트.

Unit tests for SLA deadlines, due-date resolution and derived values.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from gearguard.services.dashboard_service import average_resolution_hours
from gearguard.services.maintenance_service import calculate_parts_cost
from gearguard.utils.sla import (
    age_in_days,
    compute_due_date,
    compute_sla,
    duration_minutes,
    is_overdue,
)

NOW = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


class TestComputeSla:
    """우선순위별 SLA 마감 시각."""

    @pytest.mark.parametrize(
        "priority, response_hours, resolution_hours",
        [
            ("Emergency", 0.5, 4),
            ("Critical", 2, 8),
            ("High", 4, 24),
            ("Medium", 8, 72),
            ("Low", 24, 168),
        ],
    )
    def test_sla_table(self, priority, response_hours, resolution_hours):
        sla = compute_sla(priority, NOW)
        assert sla.response_hours == response_hours
        assert sla.resolution_hours == resolution_hours
        assert sla.response_deadline == NOW + timedelta(hours=response_hours)
        assert sla.resolution_deadline == NOW + timedelta(hours=resolution_hours)

    def test_emergency_response_is_thirty_minutes(self):
        assert compute_sla("Emergency", NOW).response_deadline == NOW + timedelta(minutes=30)

    def test_unknown_priority_rejected(self):
        with pytest.raises(ValueError):
            compute_sla("Whenever", NOW)

    def test_as_fields_maps_columns(self):
        fields = compute_sla("Critical", NOW).as_fields()
        assert fields["sla_response_hours"] == 2
        assert fields["resolution_deadline"] == NOW + timedelta(hours=8)


class TestDueDate:
    """마감일 결정 규칙."""

    def test_explicit_due_date_wins(self):
        explicit = NOW + timedelta(days=10)
        assert compute_due_date("High", NOW, scheduled_date=NOW + timedelta(days=2), due_date=explicit) == explicit

    def test_scheduled_date_used_when_no_due_date(self):
        scheduled = NOW + timedelta(days=2)
        assert compute_due_date("High", NOW, scheduled_date=scheduled) == scheduled

    def test_priority_default_offset(self):
        assert compute_due_date("Emergency", NOW) == NOW + timedelta(hours=2)
        assert compute_due_date("Low", NOW) == NOW + timedelta(days=7)


class TestDerivedValues:
    """기한 초과, 소요 시간, 경과 일수, 부품 비용."""

    def test_overdue_when_open_and_past_due(self):
        assert is_overdue("In Progress", NOW - timedelta(minutes=1), NOW) is True

    def test_not_overdue_without_due_date(self):
        assert is_overdue("New", None, NOW) is False

    @pytest.mark.parametrize("status", ["Completed", "Cancelled", "Rejected"])
    def test_terminal_never_overdue(self, status):
        assert is_overdue(status, NOW - timedelta(days=30), NOW) is False

    def test_not_overdue_before_due(self):
        assert is_overdue("Assigned", NOW + timedelta(hours=1), NOW) is False

    def test_duration_needs_both_ends(self):
        assert duration_minutes(NOW, None) is None
        assert duration_minutes(NOW, NOW + timedelta(minutes=90)) == 90

    def test_age_in_days(self):
        assert age_in_days(NOW - timedelta(days=3, hours=5), NOW) == 3
        assert age_in_days(NOW, NOW) == 0

    def test_parts_cost(self):
        parts = [SimpleNamespace(quantity=2, unit_cost=10), SimpleNamespace(quantity=1, unit_cost=5)]
        assert calculate_parts_cost(parts) == 25

    def test_parts_cost_empty(self):
        assert calculate_parts_cost([]) == 0

    def test_average_resolution_hours(self):
        spans = [(NOW, NOW + timedelta(hours=2)), (NOW, NOW + timedelta(hours=4))]
        assert average_resolution_hours(spans) == 3
        assert average_resolution_hours([]) is None
