"""정비 요청 번호 테스트.

Request numbering tests: Format, per-month sequencing, collision retry
and concurrent creation.
"""

import asyncio
import re
from datetime import datetime, timezone
from pathlib import Path

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from gearguard.database import Base
from gearguard.models.maintenance import MaintenanceRequest, RequestNumberSequence
from gearguard.models.team import Team
from gearguard.models.workshop import Workshop
from gearguard.repositories.maintenance_repository import maintenance_repository
from gearguard.schemas.maintenance import MaintenanceRequestCreate
from gearguard.services.maintenance_service import maintenance_service
from gearguard.utils.request_number import (
    format_request_number,
    is_valid_request_number,
    parse_sequence,
    period_for,
)
from tests.conftest import API, auth_header, create_equipment, create_request, create_user

NUMBER_RE = re.compile(r"^MR-\d{6}-\d{4}$")


class TestRequestNumberFormat:
    """번호 형식 유틸리티."""

    def test_format(self):
        assert format_request_number("202610", 7) == "MR-202610-0007"

    def test_widens_past_9999(self):
        number = format_request_number("202610", 12345)
        assert number == "MR-202610-12345"
        assert parse_sequence(number) == 12345

    def test_period_for(self):
        assert period_for(datetime(2026, 1, 31, 23, 59, tzinfo=timezone.utc)) == "202601"

    def test_validation(self):
        assert is_valid_request_number("MR-202610-0001")
        assert not is_valid_request_number("MR-202613-0001")
        assert not is_valid_request_number("WO-202610-0001")
        assert parse_sequence("garbage") is None
        assert parse_sequence("MR-202613-0001") is None


class TestRequestNumberAllocation:
    """번호 발급 (월별 순번)."""

    async def test_sequential_numbers(self, client: AsyncClient, employee, equipment):
        first = await create_request(client, employee, equipment)
        second = await create_request(client, employee, equipment)

        assert NUMBER_RE.match(first["request_number"])
        assert NUMBER_RE.match(second["request_number"])
        assert parse_sequence(second["request_number"]) == parse_sequence(first["request_number"]) + 1
        assert first["request_number"][:10] == second["request_number"][:10]

    async def test_counter_seeded_from_existing_numbers(self, db: AsyncSession, client: AsyncClient, employee, equipment):
        """카운터가 없으면 기존 최대 번호에서 이어서 발급."""
        created = await create_request(client, employee, equipment)
        period = created["request_number"][3:9]

        # 카운터 행 삭제 후 재발급 (Drop the counter row, numbering must continue)
        counter = await db.get(RequestNumberSequence, period)
        await db.delete(counter)
        await db.commit()

        number = await maintenance_repository.next_request_number(db, datetime.now(timezone.utc))
        await db.rollback()
        assert parse_sequence(number) == parse_sequence(created["request_number"]) + 1

    async def test_stale_counter_moves_past_issued_numbers(
        self, db: AsyncSession, client: AsyncClient, employee, equipment
    ):
        """카운터가 발급 번호보다 뒤처져도 다음 번호 발급."""
        first = await create_request(client, employee, equipment)
        period = first["request_number"][3:9]

        counter = await db.get(RequestNumberSequence, period)
        counter.last_value = 0
        await db.commit()

        second = await create_request(client, employee, equipment)
        assert parse_sequence(second["request_number"]) == parse_sequence(first["request_number"]) + 1

        await db.refresh(counter)
        assert counter.last_value == parse_sequence(second["request_number"])

    async def test_exhausted_retries_fail_with_creation_failed(
        self, client: AsyncClient, employee, equipment, monkeypatch
    ):
        """번호 충돌이 계속되면 CREATION_FAILED."""
        existing = await create_request(client, employee, equipment)
        equipment_id = str(equipment.id)
        headers = auth_header(employee)

        async def _colliding_number(db, now):
            return existing["request_number"]

        monkeypatch.setattr(maintenance_repository, "next_request_number", _colliding_number)

        res = await client.post(
            f"{API}/maintenance-requests",
            json={"title": "Second", "description": "Collides", "equipment_id": equipment_id},
            headers=headers,
        )
        assert res.status_code == 409
        assert res.json()["code"] == "CREATION_FAILED"

        monkeypatch.undo()
        listing = await client.get(f"{API}/maintenance-requests", headers=headers)
        assert listing.json()["total"] == 1


class TestConcurrentCreation:
    """동시 생성 시 번호 중복 없음."""

    async def test_concurrent_creations_get_distinct_numbers(self, tmp_path: Path):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'numbers.db'}")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

        async with factory() as setup:
            workshop = Workshop(name="Plant", code="PLT")
            setup.add(workshop)
            await setup.commit()
            requester = await create_user(setup, "req@test.com", workshop=workshop)
            team = Team(name="Crew", workshop_id=workshop.id)
            setup.add(team)
            await setup.commit()
            equipment = await create_equipment(setup, workshop, team, "SN-CONC-1")

        async def _create(index: int) -> str:
            async with factory() as session:
                data = MaintenanceRequestCreate(
                    title=f"Concurrent {index}",
                    description="Created in parallel",
                    equipment_id=equipment.id,
                )
                request = await maintenance_service.create_request(session, data, requester)
                await session.commit()
                return request.request_number

        numbers = await asyncio.gather(*[_create(i) for i in range(5)])

        assert len(set(numbers)) == 5
        assert sorted(parse_sequence(n) for n in numbers) == [1, 2, 3, 4, 5]

        async with factory() as check:
            stored = (await check.execute(select(MaintenanceRequest.request_number))).scalars().all()
        assert sorted(stored) == sorted(numbers)
        await engine.dispose()
