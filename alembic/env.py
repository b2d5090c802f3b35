"""Alembic 마이그레이션 환경 (애플리케이션 엔진과 메타데이터 사용).

Alembic migration environment. Uses the application's async engine and
model metadata so migrations always target settings.DATABASE_URL.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection

from gearguard import models  # noqa: F401  모델 import 시 metadata 채워짐 (populates metadata)
from gearguard.database import Base, engine as app_engine

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """오프라인 모드: SQL 스크립트 출력 (Emit SQL without a connection)."""
    context.configure(
        url=str(app_engine.url),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        render_as_batch=(app_engine.dialect.name == "sqlite"),
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=(connection.dialect.name == "sqlite"),
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """온라인 모드 (비동기 엔진 연결에서 동기 마이그레이션 실행)."""
    async with app_engine.connect() as connection:
        await connection.run_sync(_run_sync)
    await app_engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
