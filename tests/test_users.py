"""사용자 관리 API 테스트.

User management API tests (Admin CRUD and the technician directory).
"""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import API, auth_header, create_user

URL = f"{API}/users"


def _payload(**overrides) -> dict:
    data = {
        "full_name": "New Tech",
        "email": "New.Tech@Test.com",
        "password": "secret123",
        "role": "technician",
        "skills": [" HVAC ", "Electrical", "HVAC"],
    }
    data.update(overrides)
    return data


class TestUserCrud:
    """관리자 사용자 관리."""

    async def test_create_user(self, client: AsyncClient, admin_user, workshop):
        res = await client.post(URL, json=_payload(workshop_id=str(workshop.id)), headers=auth_header(admin_user))
        assert res.status_code == 201, res.text
        data = res.json()
        assert data["email"] == "new.tech@test.com"
        assert data["skills"] == ["HVAC", "Electrical"]
        assert data["workload"] == 0
        assert "password_hash" not in data

    async def test_duplicate_email(self, client: AsyncClient, admin_user, employee):
        res = await client.post(URL, json=_payload(email="EMPLOYEE@test.com"), headers=auth_header(admin_user))
        assert res.status_code == 409
        assert res.json()["code"] == "EMAIL_EXISTS"

    async def test_unknown_workshop(self, client: AsyncClient, admin_user):
        res = await client.post(
            URL,
            json=_payload(workshop_id="00000000-0000-0000-0000-000000000001"),
            headers=auth_header(admin_user),
        )
        assert res.status_code == 400
        assert res.json()["code"] == "INVALID_WORKSHOP"

    async def test_invalid_payload(self, client: AsyncClient, admin_user):
        res = await client.post(URL, json=_payload(email="not-an-email"), headers=auth_header(admin_user))
        assert res.status_code == 422
        res = await client.post(URL, json=_payload(role="superuser"), headers=auth_header(admin_user))
        assert res.status_code == 422

    async def test_non_admin_forbidden(self, client: AsyncClient, technician):
        res = await client.post(URL, json=_payload(), headers=auth_header(technician))
        assert res.status_code == 403
        res = await client.get(URL, headers=auth_header(technician))
        assert res.status_code == 403

    async def test_list_filters(self, client: AsyncClient, admin_user, technician, employee):
        res = await client.get(URL, params={"role": "technician"}, headers=auth_header(admin_user))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == str(technician.id)

        res = await client.get(URL, params={"search": "employee"}, headers=auth_header(admin_user))
        assert [u["id"] for u in res.json()["items"]] == [str(employee.id)]

    async def test_update_user(self, client: AsyncClient, admin_user, technician):
        res = await client.put(
            f"{URL}/{technician.id}",
            json={"skills": ["Plumbing"], "department": "Facilities"},
            headers=auth_header(admin_user),
        )
        assert res.status_code == 200
        assert res.json()["skills"] == ["Plumbing"]
        assert res.json()["department"] == "Facilities"

    async def test_update_rejects_unknown_fields(self, client: AsyncClient, admin_user, technician):
        res = await client.put(f"{URL}/{technician.id}", json={"workload": 0}, headers=auth_header(admin_user))
        assert res.status_code == 422

    async def test_deactivate_user(self, client: AsyncClient, admin_user, employee):
        res = await client.delete(f"{URL}/{employee.id}", headers=auth_header(admin_user))
        assert res.status_code == 200
        assert res.json()["status"] == "inactive"

    async def test_cannot_deactivate_self(self, client: AsyncClient, admin_user):
        res = await client.delete(f"{URL}/{admin_user.id}", headers=auth_header(admin_user))
        assert res.status_code == 400

    async def test_get_unknown_user(self, client: AsyncClient, admin_user):
        res = await client.get(f"{URL}/00000000-0000-0000-0000-000000000001", headers=auth_header(admin_user))
        assert res.status_code == 404


class TestTechnicianDirectory:
    """기술자 목록 (작업량 오름차순)."""

    async def test_ordered_by_workload(self, db: AsyncSession, client: AsyncClient, admin_user, workshop):
        busy = await create_user(db, "busy@test.com", role="technician", workshop=workshop, skills=["HVAC"], workload=5)
        idle = await create_user(db, "idle@test.com", role="technician", workshop=workshop, skills=["HVAC"], workload=0)
        await create_user(db, "sparky@test.com", role="technician", workshop=workshop, skills=["Electrical"], workload=1)

        res = await client.get(f"{URL}/technicians", params={"skill": "hvac"}, headers=auth_header(admin_user))
        assert res.status_code == 200
        assert [t["id"] for t in res.json()] == [str(idle.id), str(busy.id)]

    async def test_team_filter(self, db: AsyncSession, client: AsyncClient, technician, team, workshop):
        await create_user(db, "outsider@test.com", role="technician", workshop=workshop, skills=["HVAC"])

        res = await client.get(f"{URL}/technicians", params={"team_id": str(team.id)}, headers=auth_header(technician))
        assert [t["id"] for t in res.json()] == [str(technician.id)]

    async def test_employee_forbidden(self, client: AsyncClient, employee):
        res = await client.get(f"{URL}/technicians", headers=auth_header(employee))
        assert res.status_code == 403


class TestWorkloadCorrection:
    """작업량 수동 보정."""

    async def test_admin_sets_workload(self, db: AsyncSession, client: AsyncClient, admin_user, technician):
        res = await client.put(f"{URL}/{technician.id}/workload", json={"workload": 7}, headers=auth_header(admin_user))
        assert res.status_code == 200
        assert res.json()["workload"] == 7

        await db.refresh(technician)
        assert technician.workload == 7

    async def test_bounds(self, client: AsyncClient, admin_user, technician):
        for value in (-1, 51):
            res = await client.put(
                f"{URL}/{technician.id}/workload", json={"workload": value}, headers=auth_header(admin_user)
            )
            assert res.status_code == 422

    async def test_admin_only(self, client: AsyncClient, technician):
        res = await client.put(f"{URL}/{technician.id}/workload", json={"workload": 0}, headers=auth_header(technician))
        assert res.status_code == 403

    async def test_unknown_user(self, client: AsyncClient, admin_user):
        res = await client.put(
            f"{URL}/00000000-0000-0000-0000-000000000000/workload",
            json={"workload": 1},
            headers=auth_header(admin_user),
        )
        assert res.status_code == 404
