"""정비 요청 생성/조회/수정 API 테스트.

Maintenance request API tests: Creation defaults, SLA deadlines,
visibility rules, filtering and updates.
"""

from datetime import datetime, timedelta, timezone

from httpx import AsyncClient

from tests.conftest import API, auth_header, create_equipment, create_request, create_user

URL = f"{API}/maintenance-requests"


def _dt(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TestRequestCreate:
    """정비 요청 생성."""

    async def test_create_sets_defaults(self, client: AsyncClient, employee, equipment, team):
        data = await create_request(client, employee, equipment)

        assert data["status"] == "New"
        assert data["created_by"] == str(employee.id)
        assert data["assigned_team_id"] == str(team.id)
        assert data["assigned_technician_id"] is None
        assert data["category"] == "HVAC"
        assert data["location"]["building"] == "A"
        assert data["location"]["specific_location"] == "North"
        assert data["due_date"] is not None
        assert data["cost"] == {"labor": 0, "parts": 0, "external": 0}
        assert data["total_cost"] == 0
        assert data["is_overdue"] is False

    async def test_sla_deadlines_follow_priority(self, client: AsyncClient, employee, equipment):
        data = await create_request(client, employee, equipment, priority="Emergency")
        created = _dt(data["created_at"])

        assert data["sla"]["response_hours"] == 0.5
        assert data["sla"]["resolution_hours"] == 4
        assert _dt(data["sla"]["response_deadline"]) == created + timedelta(minutes=30)
        assert _dt(data["sla"]["resolution_deadline"]) == created + timedelta(hours=4)
        assert _dt(data["due_date"]) == created + timedelta(hours=2)

    async def test_scheduled_date_becomes_due_date(self, client: AsyncClient, employee, equipment):
        scheduled = "2030-05-01T08:00:00Z"
        data = await create_request(client, employee, equipment, type="Preventive", scheduled_date=scheduled)
        assert _dt(data["due_date"]) == _dt(scheduled)

    async def test_explicit_location_and_tags(self, client: AsyncClient, employee, equipment):
        data = await create_request(
            client, employee, equipment,
            location={"building": "B", "room": "12"},
            tags=["Urgent", "urgent", " Roof "],
        )
        assert data["location"]["building"] == "B"
        assert data["tags"] == ["urgent", "roof"]

    async def test_unknown_equipment_returns_404(self, client: AsyncClient, employee):
        res = await client.post(URL, json={
            "title": "Broken",
            "description": "Nothing here",
            "equipment_id": "00000000-0000-0000-0000-000000000001",
        }, headers=auth_header(employee))
        assert res.status_code == 404

    async def test_inactive_equipment_rejected(self, db, client: AsyncClient, employee, equipment):
        equipment.is_active = False
        await db.commit()
        res = await client.post(URL, json={
            "title": "Broken",
            "description": "Retired unit",
            "equipment_id": str(equipment.id),
        }, headers=auth_header(employee))
        assert res.status_code == 400
        assert res.json()["code"] == "EQUIPMENT_INACTIVE"

    async def test_validation_errors(self, client: AsyncClient, employee, equipment):
        headers = auth_header(employee)
        base = {"title": "x", "description": "y", "equipment_id": str(equipment.id)}

        res = await client.post(URL, json={**base, "title": "a" * 201}, headers=headers)
        assert res.status_code == 422
        res = await client.post(URL, json={**base, "priority": "Whenever"}, headers=headers)
        assert res.status_code == 422
        res = await client.post(URL, json={**base, "status": "Completed"}, headers=headers)
        assert res.status_code == 422

    async def test_requires_authentication(self, client: AsyncClient, equipment):
        res = await client.post(URL, json={"title": "x", "description": "y", "equipment_id": str(equipment.id)})
        assert res.status_code == 401


class TestRequestRead:
    """정비 요청 조회 및 권한."""

    async def test_creator_and_admin_can_read(self, client: AsyncClient, employee, admin_user, equipment):
        created = await create_request(client, employee, equipment)
        for user in (employee, admin_user):
            res = await client.get(f"{URL}/{created['id']}", headers=auth_header(user))
            assert res.status_code == 200
            assert res.json()["request_number"] == created["request_number"]

    async def test_team_technician_can_read(self, client: AsyncClient, employee, technician, equipment):
        created = await create_request(client, employee, equipment)
        res = await client.get(f"{URL}/{created['id']}", headers=auth_header(technician))
        assert res.status_code == 200

    async def test_other_employee_denied(self, db, client: AsyncClient, employee, workshop, equipment):
        created = await create_request(client, employee, equipment)
        other = await create_user(db, "other@test.com", workshop=workshop)
        res = await client.get(f"{URL}/{created['id']}", headers=auth_header(other))
        assert res.status_code == 403
        assert res.json()["code"] == "REQUEST_ACCESS_DENIED"

    async def test_missing_request_returns_404(self, client: AsyncClient, admin_user):
        res = await client.get(f"{URL}/00000000-0000-0000-0000-000000000009", headers=auth_header(admin_user))
        assert res.status_code == 404


class TestRequestList:
    """정비 요청 목록 (범위와 필터)."""

    async def test_employee_sees_only_own_requests(self, db, client: AsyncClient, employee, workshop, equipment):
        other = await create_user(db, "other@test.com", workshop=workshop)
        await create_request(client, employee, equipment)
        await create_request(client, other, equipment)

        res = await client.get(URL, headers=auth_header(employee))
        assert res.status_code == 200
        body = res.json()
        assert body["total"] == 1
        assert body["items"][0]["created_by"] == str(employee.id)

    async def test_admin_filters(self, db, client: AsyncClient, employee, admin_user, workshop, team, equipment):
        pump = await create_equipment(db, workshop, team, "SN-PUMP-1", category="Plumbing", name="Pump")
        await create_request(client, employee, equipment, priority="Low")
        await create_request(client, employee, pump, title="Leaking pump", priority="Critical")

        headers = auth_header(admin_user)
        res = await client.get(URL, params={"priority": "Critical"}, headers=headers)
        assert res.json()["total"] == 1
        assert res.json()["items"][0]["category"] == "Plumbing"

        res = await client.get(URL, params={"equipment_id": str(equipment.id)}, headers=headers)
        assert res.json()["total"] == 1

        res = await client.get(URL, params={"search": "leaking"}, headers=headers)
        assert res.json()["total"] == 1

        res = await client.get(URL, params={"workshop_id": str(workshop.id)}, headers=headers)
        assert res.json()["total"] == 2

    async def test_pagination_bounds(self, client: AsyncClient, admin_user):
        headers = auth_header(admin_user)
        assert (await client.get(URL, params={"page": 0}, headers=headers)).status_code == 422
        assert (await client.get(URL, params={"per_page": 101}, headers=headers)).status_code == 422

    async def test_pagination(self, client: AsyncClient, employee, equipment):
        for i in range(3):
            await create_request(client, employee, equipment, title=f"Request {i}")
        res = await client.get(URL, params={"page": 2, "per_page": 2}, headers=auth_header(employee))
        body = res.json()
        assert body["total"] == 3
        assert body["page"] == 2
        assert body["pages"] == 2
        assert len(body["items"]) == 1


class TestRequestUpdate:
    """정비 요청 수정."""

    async def test_priority_change_recomputes_sla(self, client: AsyncClient, employee, equipment):
        created = await create_request(client, employee, equipment, priority="Low")
        before = _dt(created["sla"]["resolution_deadline"])

        res = await client.put(f"{URL}/{created['id']}", json={"priority": "Critical"}, headers=auth_header(employee))
        assert res.status_code == 200, res.text
        data = res.json()
        assert data["priority"] == "Critical"
        assert data["sla"]["response_hours"] == 2
        assert data["sla"]["resolution_hours"] == 8
        assert _dt(data["sla"]["resolution_deadline"]) < before
        assert _dt(data["sla"]["resolution_deadline"]) - _dt(data["sla"]["response_deadline"]) == timedelta(hours=6)

    async def test_unknown_field_rejected(self, client: AsyncClient, employee, equipment):
        created = await create_request(client, employee, equipment)
        res = await client.put(
            f"{URL}/{created['id']}", json={"request_number": "MR-209901-0001"}, headers=auth_header(employee)
        )
        assert res.status_code == 422

    async def test_technician_cannot_edit(self, client: AsyncClient, employee, technician, equipment):
        created = await create_request(client, employee, equipment)
        res = await client.put(f"{URL}/{created['id']}", json={"title": "Changed"}, headers=auth_header(technician))
        assert res.status_code == 403

    async def test_overdue_flag(self, client: AsyncClient, employee, equipment):
        past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
        created = await create_request(client, employee, equipment, due_date=past)
        assert created["is_overdue"] is True
