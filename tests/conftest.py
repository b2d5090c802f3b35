"""테스트 인프라 (인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처).

Test infrastructure: In-memory SQLite database, session and httpx client
fixtures. The schema is created from model metadata for every test, so
each test starts from an empty database. Fixture data is committed so it
survives the rollbacks some operations perform.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["SMTP_HOST"] = ""
os.environ["AXIOM_API_TOKEN"] = ""

from collections.abc import AsyncGenerator  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from gearguard.database import Base, get_db  # noqa: E402
from gearguard.main import app  # noqa: E402
from gearguard.models import *  # noqa: F401,F403,E402 (register all models with metadata)
from gearguard.models.equipment import Equipment  # noqa: E402
from gearguard.models.team import Team, TeamMember  # noqa: E402
from gearguard.models.user import User  # noqa: E402
from gearguard.models.workshop import Workshop  # noqa: E402
from gearguard.utils.jwt import create_access_token  # noqa: E402
from gearguard.utils.password import hash_password  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"
API = "/api/v1"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진 (단일 커넥션 인메모리 DB에 스키마 생성)."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 (DB 세션을 오버라이드합니다)."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def create_user(
    db: AsyncSession,
    email: str,
    role: str = "employee",
    full_name: str | None = None,
    workshop: Workshop | None = None,
    skills: list[str] | None = None,
    workload: int = 0,
    password: str = "secret123",
    status: str = "active",
) -> User:
    """사용자를 생성하고 커밋합니다."""
    user = User(
        email=email,
        full_name=full_name or email.split("@")[0].title(),
        password_hash=hash_password(password),
        role=role,
        status=status,
        workshop_id=workshop.id if workshop else None,
        skills=skills or [],
        workload=workload,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_equipment(
    db: AsyncSession,
    workshop: Workshop,
    team: Team,
    serial_number: str,
    category: str = "HVAC",
    name: str = "Rooftop AC Unit",
) -> Equipment:
    equipment = Equipment(
        name=name,
        serial_number=serial_number,
        workshop_id=workshop.id,
        category=category,
        location={"building": "A", "floor": "3", "room": "301", "zone": "North"},
        assigned_team_id=team.id,
    )
    db.add(equipment)
    await db.commit()
    await db.refresh(equipment)
    return equipment


@pytest_asyncio.fixture
async def workshop(db: AsyncSession) -> Workshop:
    """테스트 작업장을 생성합니다."""
    w = Workshop(name="Main Plant", code="MAIN")
    db.add(w)
    await db.commit()
    await db.refresh(w)
    return w


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession, workshop) -> User:
    """관리자 사용자를 생성합니다."""
    return await create_user(db, "admin@test.com", role="admin", full_name="Test Admin", workshop=workshop)


@pytest_asyncio.fixture
async def technician(db: AsyncSession, workshop) -> User:
    """HVAC 기술자를 생성합니다 (팀장)."""
    return await create_user(
        db, "tech@test.com", role="technician", full_name="Test Tech", workshop=workshop, skills=["HVAC"]
    )


@pytest_asyncio.fixture
async def employee(db: AsyncSession, workshop) -> User:
    """일반 직원(요청자)을 생성합니다."""
    return await create_user(db, "employee@test.com", role="employee", full_name="Test Employee", workshop=workshop)


@pytest_asyncio.fixture
async def team(db: AsyncSession, workshop, technician) -> Team:
    """technician 을 팀장으로 하는 팀을 생성합니다."""
    t = Team(name="HVAC Crew", workshop_id=workshop.id, team_lead_id=technician.id, specialization=["HVAC"])
    t.members.append(TeamMember(user_id=technician.id, member_role="lead"))
    db.add(t)
    await db.commit()
    await db.refresh(t)
    return t


@pytest_asyncio.fixture
async def equipment(db: AsyncSession, workshop, team) -> Equipment:
    """HVAC 설비를 생성합니다."""
    return await create_equipment(db, workshop, team, "SN-HVAC-001")


def make_token(user: User) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token(user.id, user.role)


def auth_header(user_or_token: User | str) -> dict[str, str]:
    token = user_or_token if isinstance(user_or_token, str) else make_token(user_or_token)
    return {"Authorization": f"Bearer {token}"}


async def create_request(client: AsyncClient, user: User, equipment: Equipment, **overrides) -> dict:
    """API로 정비 요청을 생성하고 응답 본문을 반환합니다."""
    payload = {
        "title": "AC not cooling",
        "description": "Unit blows warm air since this morning",
        "equipment_id": str(equipment.id),
        "priority": "High",
    }
    payload.update(overrides)
    res = await client.post(f"{API}/maintenance-requests", json=payload, headers=auth_header(user))
    assert res.status_code == 201, res.text
    return res.json()
