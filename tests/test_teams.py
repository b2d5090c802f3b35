"""팀 API 테스트 (팀 생성, 구성원 관리, 작업량).

Team API tests (Team creation, membership rules and workload view).
"""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import API, auth_header, create_request, create_user

URL = f"{API}/teams"


class TestTeams:
    """팀 생성/수정."""

    async def test_create_team_adds_lead_member(self, client: AsyncClient, admin_user, workshop, technician):
        res = await client.post(
            URL,
            json={"name": "Electrical", "workshop_id": str(workshop.id), "team_lead_id": str(technician.id)},
            headers=auth_header(admin_user),
        )
        assert res.status_code == 201, res.text
        data = res.json()
        assert data["team_lead_id"] == str(technician.id)
        assert data["active_members_count"] == 1
        assert data["members"][0]["member_role"] == "lead"
        assert data["members"][0]["full_name"] == "Test Tech"

    async def test_lead_must_be_technician(self, client: AsyncClient, admin_user, workshop, employee):
        res = await client.post(
            URL,
            json={"name": "Electrical", "workshop_id": str(workshop.id), "team_lead_id": str(employee.id)},
            headers=auth_header(admin_user),
        )
        assert res.status_code == 400
        assert res.json()["code"] == "INVALID_TEAM_LEAD"

    async def test_unknown_workshop(self, client: AsyncClient, admin_user):
        res = await client.post(
            URL,
            json={"name": "Ghost", "workshop_id": "00000000-0000-0000-0000-000000000001"},
            headers=auth_header(admin_user),
        )
        assert res.status_code == 400
        assert res.json()["code"] == "INVALID_WORKSHOP"

    async def test_non_admin_forbidden(self, client: AsyncClient, technician, workshop):
        res = await client.post(URL, json={"name": "Mine", "workshop_id": str(workshop.id)}, headers=auth_header(technician))
        assert res.status_code == 403

    async def test_capacity_below_members(self, db: AsyncSession, client: AsyncClient, admin_user, workshop, team):
        other = await create_user(db, "junior@test.com", role="technician", workshop=workshop)
        await client.post(f"{URL}/{team.id}/members", json={"user_id": str(other.id)}, headers=auth_header(admin_user))

        res = await client.put(f"{URL}/{team.id}", json={"max_capacity": 1}, headers=auth_header(admin_user))
        assert res.status_code == 400
        assert res.json()["code"] == "CAPACITY_TOO_LOW"

    async def test_list_and_get(self, client: AsyncClient, employee, team):
        res = await client.get(URL, headers=auth_header(employee))
        assert res.status_code == 200
        assert [t["id"] for t in res.json()] == [str(team.id)]

        res = await client.get(f"{URL}/{team.id}", headers=auth_header(employee))
        assert res.json()["name"] == "HVAC Crew"


class TestMembers:
    """구성원 관리."""

    async def test_add_member(self, db: AsyncSession, client: AsyncClient, admin_user, workshop, team):
        other = await create_user(db, "junior@test.com", role="technician", workshop=workshop)
        res = await client.post(
            f"{URL}/{team.id}/members",
            json={"user_id": str(other.id), "member_role": "senior"},
            headers=auth_header(admin_user),
        )
        assert res.status_code == 201, res.text
        assert res.json()["active_members_count"] == 2

    async def test_already_member(self, client: AsyncClient, admin_user, technician, team):
        res = await client.post(
            f"{URL}/{team.id}/members", json={"user_id": str(technician.id)}, headers=auth_header(admin_user)
        )
        assert res.status_code == 409
        assert res.json()["code"] == "ALREADY_MEMBER"

    async def test_team_full(self, db: AsyncSession, client: AsyncClient, admin_user, workshop, team):
        await client.put(f"{URL}/{team.id}", json={"max_capacity": 1}, headers=auth_header(admin_user))
        other = await create_user(db, "junior@test.com", role="technician", workshop=workshop)

        res = await client.post(f"{URL}/{team.id}/members", json={"user_id": str(other.id)}, headers=auth_header(admin_user))
        assert res.status_code == 400
        assert res.json()["code"] == "TEAM_FULL"

    async def test_remove_lead_clears_lead(self, client: AsyncClient, admin_user, technician, team):
        res = await client.delete(f"{URL}/{team.id}/members/{technician.id}", headers=auth_header(admin_user))
        assert res.status_code == 200
        data = res.json()
        assert data["team_lead_id"] is None
        assert data["members"] == []

    async def test_remove_non_member(self, client: AsyncClient, admin_user, employee, team):
        res = await client.delete(f"{URL}/{team.id}/members/{employee.id}", headers=auth_header(admin_user))
        assert res.status_code == 404


class TestWorkload:
    """팀 작업량."""

    async def test_workload_view(self, client: AsyncClient, admin_user, employee, technician, team, equipment):
        created = await create_request(client, employee, equipment)
        await create_request(client, employee, equipment)
        await client.post(
            f"{API}/maintenance-requests/{created['id']}/assign",
            json={"technician_id": str(technician.id)},
            headers=auth_header(admin_user),
        )

        res = await client.get(f"{URL}/{team.id}/workload", headers=auth_header(technician))
        assert res.status_code == 200
        data = res.json()
        assert data["open_requests"] == 2
        assert data["members"] == [{"user_id": str(technician.id), "full_name": "Test Tech", "workload": 1}]

    async def test_employee_forbidden(self, client: AsyncClient, employee, team):
        res = await client.get(f"{URL}/{team.id}/workload", headers=auth_header(employee))
        assert res.status_code == 403
