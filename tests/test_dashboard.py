"""대시보드 API 테스트 (통계, 기한 초과, 캘린더).

Dashboard API tests (Statistics, overdue list, calendar events, technician
workload board and alerts).
"""

from datetime import timedelta
from uuid import UUID

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.equipment import Equipment
from gearguard.models.maintenance import MaintenanceRequest
from gearguard.models.types import utcnow
from tests.conftest import API, auth_header, create_request, create_user

URL = f"{API}/dashboard"
REQUESTS = f"{API}/maintenance-requests"


def _iso(value) -> str:
    return value.isoformat().replace("+00:00", "Z")


async def _complete(db: AsyncSession, request_id: str, hours: float) -> None:
    """요청을 완료 처리하고 해결 시간을 고정합니다."""
    request = await db.get(MaintenanceRequest, UUID(request_id))
    request.status = "Completed"
    request.completed_at = request.created_at + timedelta(hours=hours)
    await db.commit()


class TestStats:
    """통계 집계."""

    async def test_empty_stats(self, client: AsyncClient, admin_user):
        res = await client.get(f"{URL}/stats", headers=auth_header(admin_user))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 0
        assert data["overdue"] == 0
        assert data["avg_resolution_hours"] is None
        assert data["by_status"]["New"] == 0
        assert data["by_priority"]["Emergency"] == 0

    async def test_counts_and_average(self, db: AsyncSession, client: AsyncClient, admin_user, employee, equipment):
        past = _iso(utcnow() - timedelta(days=1))
        first = await create_request(client, employee, equipment, priority="Low")
        second = await create_request(client, employee, equipment, priority="Low", type="Preventive")
        await create_request(client, employee, equipment, priority="Critical", due_date=past)
        cancelled = await create_request(client, employee, equipment, priority="High")
        await _complete(db, first["id"], 2)
        await _complete(db, second["id"], 4)
        request = await db.get(MaintenanceRequest, UUID(cancelled["id"]))
        request.status = "Cancelled"
        await db.commit()

        res = await client.get(f"{URL}/stats", headers=auth_header(admin_user))
        data = res.json()
        assert data["total"] == 4
        assert data["open"] == 1
        assert data["by_status"]["Completed"] == 2
        assert data["by_status"]["Cancelled"] == 1
        assert data["by_status"]["New"] == 1
        assert data["by_priority"]["Low"] == 2
        assert data["by_type"]["Preventive"] == 1
        assert data["by_type"]["Corrective"] == 3
        assert data["overdue"] == 1
        # 완료 요청만 평균에 포함
        assert data["avg_resolution_hours"] == 3.0

    async def test_filters(self, client: AsyncClient, admin_user, employee, workshop, team, technician, equipment):
        assigned = await create_request(client, employee, equipment)
        await create_request(client, employee, equipment)
        await client.post(
            f"{REQUESTS}/{assigned['id']}/assign",
            json={"technician_id": str(technician.id)},
            headers=auth_header(admin_user),
        )

        res = await client.get(
            f"{URL}/stats", params={"technician_id": str(technician.id)}, headers=auth_header(admin_user)
        )
        assert res.json()["total"] == 1

        res = await client.get(f"{URL}/stats", params={"team_id": str(team.id)}, headers=auth_header(admin_user))
        assert res.json()["total"] == 2

        res = await client.get(
            f"{URL}/stats", params={"workshop_id": str(workshop.id)}, headers=auth_header(admin_user)
        )
        assert res.json()["total"] == 2

    async def test_date_range(self, client: AsyncClient, admin_user, employee, equipment):
        await create_request(client, employee, equipment)
        now = utcnow()

        res = await client.get(
            f"{URL}/stats",
            params={"date_from": _iso(now - timedelta(hours=1)), "date_to": _iso(now + timedelta(hours=1))},
            headers=auth_header(admin_user),
        )
        assert res.json()["total"] == 1

        res = await client.get(
            f"{URL}/stats",
            params={"date_from": _iso(now + timedelta(hours=1)), "date_to": _iso(now + timedelta(hours=2))},
            headers=auth_header(admin_user),
        )
        assert res.json()["total"] == 0

    async def test_inverted_range_rejected(self, client: AsyncClient, admin_user):
        now = utcnow()
        res = await client.get(
            f"{URL}/stats",
            params={"date_from": _iso(now), "date_to": _iso(now - timedelta(days=1))},
            headers=auth_header(admin_user),
        )
        assert res.status_code == 400
        assert res.json()["code"] == "INVALID_DATE_RANGE"

    async def test_employee_sees_own_requests_only(self, db: AsyncSession, client: AsyncClient, employee, workshop, equipment):
        other = await create_user(db, "other@test.com", workshop=workshop)
        await create_request(client, employee, equipment)
        await create_request(client, other, equipment)

        res = await client.get(f"{URL}/stats", headers=auth_header(employee))
        assert res.json()["total"] == 1


class TestOverdueAndRecent:
    """기한 초과 및 최근 목록."""

    async def test_overdue_list_excludes_terminal(self, db: AsyncSession, client: AsyncClient, admin_user, employee, equipment):
        past = _iso(utcnow() - timedelta(hours=3))
        late = await create_request(client, employee, equipment, due_date=past)
        done = await create_request(client, employee, equipment, due_date=past)
        await create_request(client, employee, equipment)
        await _complete(db, done["id"], 1)

        res = await client.get(f"{REQUESTS}/overdue", headers=auth_header(admin_user))
        assert res.status_code == 200
        items = res.json()
        assert [r["id"] for r in items] == [late["id"]]
        assert items[0]["is_overdue"] is True

    async def test_recent_newest_first(self, client: AsyncClient, admin_user, employee, equipment):
        first = await create_request(client, employee, equipment, title="First")
        second = await create_request(client, employee, equipment, title="Second")

        res = await client.get(f"{URL}/recent", params={"limit": 2}, headers=auth_header(admin_user))
        assert [r["id"] for r in res.json()] == [second["id"], first["id"]]


class TestCalendar:
    """캘린더 이벤트."""

    async def test_events_in_window(self, client: AsyncClient, admin_user, employee, equipment):
        now = utcnow()
        inside = await create_request(
            client, employee, equipment, priority="Critical", scheduled_date=_iso(now + timedelta(days=2))
        )
        await create_request(client, employee, equipment, scheduled_date=_iso(now + timedelta(days=40)))

        res = await client.get(
            f"{REQUESTS}/calendar",
            params={"start": _iso(now + timedelta(days=1)), "end": _iso(now + timedelta(days=7))},
            headers=auth_header(admin_user),
        )
        assert res.status_code == 200, res.text
        events = res.json()
        assert len(events) == 1
        event = events[0]
        assert event["id"] == inside["id"]
        assert event["title"] == f"{inside['request_number']}: AC not cooling"
        assert event["priority"] == "Critical"
        assert event["color"].startswith("#")
        assert event["start"] is not None

    async def test_inverted_window_rejected(self, client: AsyncClient, admin_user):
        now = utcnow()
        res = await client.get(
            f"{REQUESTS}/calendar",
            params={"start": _iso(now), "end": _iso(now)},
            headers=auth_header(admin_user),
        )
        assert res.status_code == 400


async def _assign(db: AsyncSession, request_id: str, technician) -> None:
    """요청을 기술자에게 배정된 상태로 만들고 작업량을 올립니다."""
    request = await db.get(MaintenanceRequest, UUID(request_id))
    request.assigned_technician_id = technician.id
    request.status = "Assigned"
    technician.workload += 1
    await db.commit()


class TestTechnicianWorkload:
    """기술자 작업량 현황."""

    async def test_admin_sees_all_technicians_busiest_first(
        self, db: AsyncSession, client: AsyncClient, admin_user, technician, employee, equipment, workshop
    ):
        busy = await create_user(db, "busy@test.com", role="technician", workshop=workshop, workload=11)
        await create_user(db, "gone@test.com", role="technician", workshop=workshop, status="inactive")
        created = await create_request(client, employee, equipment)
        await _assign(db, created["id"], technician)

        res = await client.get(f"{URL}/workload/technicians", headers=auth_header(admin_user))
        assert res.status_code == 200
        data = res.json()
        assert [t["id"] for t in data["technicians"]] == [str(busy.id), str(technician.id)]
        assert data["technicians"][0]["overloaded"] is True
        ours = data["technicians"][1]
        assert ours["workload"] == 1
        assert ours["active_assignments"] == 1
        assert ours["assignments"][0]["request_number"] == created["request_number"]
        assert data["summary"] == {"total_technicians": 2, "average_workload": 6.0, "overloaded": 1}

    async def test_completed_requests_not_listed(
        self, db: AsyncSession, client: AsyncClient, admin_user, technician, employee, equipment
    ):
        created = await create_request(client, employee, equipment)
        await _assign(db, created["id"], technician)
        await _complete(db, created["id"], 1)

        res = await client.get(f"{URL}/workload/technicians", headers=auth_header(admin_user))
        assert res.json()["technicians"][0]["assignments"] == []

    async def test_team_lead_sees_own_team(self, db: AsyncSession, client: AsyncClient, technician, team, workshop):
        await create_user(db, "outsider@test.com", role="technician", workshop=workshop, workload=3)

        res = await client.get(f"{URL}/workload/technicians", headers=auth_header(technician))
        assert res.status_code == 200
        assert [t["id"] for t in res.json()["technicians"]] == [str(technician.id)]

    async def test_others_forbidden(self, db: AsyncSession, client: AsyncClient, employee, workshop):
        member = await create_user(db, "member@test.com", role="technician", workshop=workshop)
        for user in (employee, member):
            res = await client.get(f"{URL}/workload/technicians", headers=auth_header(user))
            assert res.status_code == 403
            assert res.json()["code"] == "WORKLOAD_ACCESS_DENIED"

    async def test_empty_board(self, client: AsyncClient, admin_user):
        res = await client.get(f"{URL}/workload/technicians", headers=auth_header(admin_user))
        assert res.json() == {
            "technicians": [],
            "summary": {"total_technicians": 0, "average_workload": 0.0, "overloaded": 0},
        }


class TestAlerts:
    """역할별 경고."""

    async def test_admin_alerts(self, db: AsyncSession, client: AsyncClient, admin_user, employee, equipment, workshop):
        await create_user(db, "busy@test.com", role="technician", workshop=workshop, workload=12)
        past = _iso(utcnow() - timedelta(hours=2))
        await create_request(client, employee, equipment, due_date=past)
        await create_request(client, employee, equipment)

        res = await client.get(f"{URL}/alerts", headers=auth_header(admin_user))
        assert res.status_code == 200
        alerts = {a["category"]: a for a in res.json()}
        assert set(alerts) == {"overdue", "assignment", "workload"}
        assert alerts["overdue"]["count"] == 1
        assert alerts["assignment"]["count"] == 2
        assert alerts["workload"]["count"] == 1

    async def test_technician_alerts(self, db: AsyncSession, client: AsyncClient, technician, employee, equipment):
        machine = await db.get(Equipment, equipment.id)
        machine.criticality = "Critical"
        machine.status = "Maintenance"
        await db.commit()
        await create_request(client, employee, equipment, due_date=_iso(utcnow() - timedelta(hours=1)))

        res = await client.get(f"{URL}/alerts", headers=auth_header(technician))
        categories = {a["category"] for a in res.json()}
        assert categories == {"overdue", "critical"}

    async def test_no_alerts(self, client: AsyncClient, admin_user, employee, equipment):
        assert (await client.get(f"{URL}/alerts", headers=auth_header(admin_user))).json() == []
        assert (await client.get(f"{URL}/alerts", headers=auth_header(employee))).json() == []
