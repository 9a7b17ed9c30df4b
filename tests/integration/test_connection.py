"""
Integration Tests - Session Scopes
"""
import pytest
from sqlalchemy import func, select

from retail_stats.database import (
    Base,
    check_database_health,
    close_database,
    get_read_only_db,
    init_database,
)
from retail_stats.database.models import Staff


@pytest.fixture
async def database(tmp_path):
    engine = await init_database(f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await close_database()


async def staff_count() -> int:
    async with get_read_only_db() as db:
        return (await db.execute(select(func.count(Staff.id)))).scalar_one()


async def test_read_only_session_never_persists(database):
    async with get_read_only_db() as db:
        db.add(Staff(id=1, name="Clerk"))
        await db.flush()

    assert await staff_count() == 0


async def test_health_check(database):
    health = await check_database_health()

    assert health["status"] == "healthy"
    assert "latency_ms" in health


async def test_health_check_without_database():
    health = await check_database_health()

    assert health["status"] == "unhealthy"


async def test_session_before_init_fails():
    with pytest.raises(RuntimeError):
        async with get_read_only_db():
            pass
