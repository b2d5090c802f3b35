"""정비 요청 배정 API 테스트.

Assignment API tests: Manual assignment, reference validation, workload
bookkeeping, auto-assignment and notifications.
"""

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.notification import Notification
from tests.conftest import API, auth_header, create_equipment, create_request, create_user

URL = f"{API}/maintenance-requests"


@pytest_asyncio.fixture
async def open_request(client: AsyncClient, employee, equipment) -> dict:
    return await create_request(client, employee, equipment)


class TestManualAssignment:
    """수동 배정."""

    async def test_assign_technician(self, db: AsyncSession, client: AsyncClient, admin_user, technician, open_request):
        res = await client.post(
            f"{URL}/{open_request['id']}/assign",
            json={"technician_id": str(technician.id)},
            headers=auth_header(admin_user),
        )
        assert res.status_code == 200, res.text
        data = res.json()
        assert data["assigned_technician_id"] == str(technician.id)
        assert data["status"] == "Assigned"

        await db.refresh(technician)
        assert technician.workload == 1

    async def test_assignment_creates_notification(self, db: AsyncSession, client: AsyncClient, admin_user, technician, open_request):
        await client.post(
            f"{URL}/{open_request['id']}/assign",
            json={"technician_id": str(technician.id)},
            headers=auth_header(admin_user),
        )
        rows = (await db.execute(select(Notification).where(Notification.user_id == technician.id))).scalars().all()
        assert len(rows) == 1
        assert rows[0].type == "request_assigned"
        assert open_request["request_number"] in rows[0].message

    async def test_unknown_technician_leaves_request_unchanged(self, client: AsyncClient, admin_user, open_request):
        res = await client.post(
            f"{URL}/{open_request['id']}/assign",
            json={"technician_id": "00000000-0000-0000-0000-00000000beef"},
            headers=auth_header(admin_user),
        )
        assert res.status_code == 400
        assert res.json()["code"] == "INVALID_TECHNICIAN"

        detail = (await client.get(f"{URL}/{open_request['id']}", headers=auth_header(admin_user))).json()
        assert detail["assigned_technician_id"] is None
        assert detail["status"] == "New"

    async def test_non_technician_rejected(self, client: AsyncClient, admin_user, employee, open_request):
        res = await client.post(
            f"{URL}/{open_request['id']}/assign",
            json={"technician_id": str(employee.id)},
            headers=auth_header(admin_user),
        )
        assert res.status_code == 400
        assert res.json()["code"] == "INVALID_TECHNICIAN"

    async def test_unknown_team_rejected_without_partial_update(
        self, db: AsyncSession, client: AsyncClient, admin_user, technician, open_request
    ):
        res = await client.post(
            f"{URL}/{open_request['id']}/assign",
            json={"technician_id": str(technician.id), "team_id": "00000000-0000-0000-0000-00000000cafe"},
            headers=auth_header(admin_user),
        )
        assert res.status_code == 400
        assert res.json()["code"] == "INVALID_TEAM"

        await db.refresh(technician)
        assert technician.workload == 0
        detail = (await client.get(f"{URL}/{open_request['id']}", headers=auth_header(admin_user))).json()
        assert detail["assigned_technician_id"] is None

    async def test_empty_payload_rejected(self, client: AsyncClient, admin_user, open_request):
        res = await client.post(f"{URL}/{open_request['id']}/assign", json={}, headers=auth_header(admin_user))
        assert res.status_code == 422

    async def test_reassignment_moves_workload(
        self, db: AsyncSession, client: AsyncClient, admin_user, technician, workshop, open_request
    ):
        second = await create_user(db, "tech2@test.com", role="technician", workshop=workshop, skills=["HVAC"])
        headers = auth_header(admin_user)
        await client.post(f"{URL}/{open_request['id']}/assign", json={"technician_id": str(technician.id)}, headers=headers)
        await client.post(f"{URL}/{open_request['id']}/assign", json={"technician_id": str(second.id)}, headers=headers)
        # 같은 기술자 재배정은 변화 없음
        await client.post(f"{URL}/{open_request['id']}/assign", json={"technician_id": str(second.id)}, headers=headers)

        await db.refresh(technician)
        await db.refresh(second)
        assert technician.workload == 0
        assert second.workload == 1

    async def test_team_lead_may_assign(self, client: AsyncClient, technician, open_request):
        res = await client.post(
            f"{URL}/{open_request['id']}/assign",
            json={"technician_id": str(technician.id)},
            headers=auth_header(technician),
        )
        assert res.status_code == 200

    async def test_employee_may_not_assign(self, client: AsyncClient, employee, technician, open_request):
        res = await client.post(
            f"{URL}/{open_request['id']}/assign",
            json={"technician_id": str(technician.id)},
            headers=auth_header(employee),
        )
        assert res.status_code == 403


class TestAutoAssignment:
    """자동 배정 (작업량이 가장 적은 적격 기술자)."""

    async def test_picks_lowest_workload_matching_skill(
        self, db: AsyncSession, client: AsyncClient, admin_user, workshop, team, technician, employee
    ):
        technician.workload = 4
        await db.commit()
        busy = await create_user(db, "busy@test.com", role="technician", workshop=workshop, skills=["HVAC"], workload=3)
        idle = await create_user(db, "idle@test.com", role="technician", workshop=workshop, skills=["hvac"], workload=1)
        await create_user(db, "sparky@test.com", role="technician", workshop=workshop, skills=["Electrical"], workload=0)
        equipment = await create_equipment(db, workshop, team, "SN-HVAC-002")
        created = await create_request(client, employee, equipment)

        res = await client.post(f"{URL}/{created['id']}/auto-assign", headers=auth_header(admin_user))
        assert res.status_code == 200, res.text
        assert res.json()["assigned_technician_id"] == str(idle.id)
        assert res.json()["status"] == "Assigned"

        await db.refresh(idle)
        await db.refresh(busy)
        assert idle.workload == 2
        assert busy.workload == 3

    async def test_no_matching_technician(self, db: AsyncSession, client: AsyncClient, admin_user, workshop, team, employee):
        await create_user(db, "sparky@test.com", role="technician", workshop=workshop, skills=["Electrical"])
        pump = await create_equipment(db, workshop, team, "SN-PUMP-001", category="Plumbing", name="Booster Pump")
        created = await create_request(client, employee, pump)

        res = await client.post(f"{URL}/{created['id']}/auto-assign", headers=auth_header(admin_user))
        assert res.status_code == 400
        assert res.json()["code"] == "NO_AVAILABLE_TECHNICIANS"

        detail = (await client.get(f"{URL}/{created['id']}", headers=auth_header(admin_user))).json()
        assert detail["assigned_technician_id"] is None

    async def test_inactive_technicians_skipped(self, db: AsyncSession, client: AsyncClient, admin_user, workshop, team, employee):
        await create_user(db, "away@test.com", role="technician", workshop=workshop, skills=["Plumbing"], status="inactive")
        pump = await create_equipment(db, workshop, team, "SN-PUMP-001", category="Plumbing", name="Booster Pump")
        created = await create_request(client, employee, pump)

        res = await client.post(f"{URL}/{created['id']}/auto-assign", headers=auth_header(admin_user))
        assert res.status_code == 400
        assert res.json()["code"] == "NO_AVAILABLE_TECHNICIANS"
