"""
Test Suite Configuration
"""
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from retail_stats.database.models import (
    Base,
    Color,
    Manufacturer,
    Order,
    OrderLine,
    OrderStatus,
    Product,
    ProductVariant,
    Staff,
    Style,
)

# Wednesday; April 2026 has 30 days and starts on a Wednesday
NOW = datetime(2026, 4, 15, 12, 0)


@pytest.fixture
def clock():
    """Clock frozen at NOW"""
    return lambda: NOW


@pytest.fixture
async def test_engine():
    """In-memory SQLite engine with the schema created"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(session_factory, shop) -> AsyncGenerator[AsyncSession, None]:
    """Fresh session over the seeded shop"""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def shop(session_factory) -> SimpleNamespace:
    """
    Seed a small hat shop.

    Orders (all in April 2026):
    - o1 delivered online, 100.00, 2 items, Apr 14
    - o2 confirmed in store, 50.50, 3 items, Apr 2
    - o3 cancelled online, 1000.00, 5 items, Apr 10

    Lines of non-cancelled orders sum to 5 units of v1, 3 of v3 (seen
    first), 3 of v2 and 1 of v4; v5 has no product.
    """
    acme = Manufacturer(id=1, name="Acme Hats")
    northwind = Manufacturer(id=2, name="Northwind")
    blank = Manufacturer(id=3, name="   ")

    red = Color(id=1, name="Red")
    blue = Color(id=2, name="Blue")

    bucket = Style(id=1, name="Bucket")
    snapback = Style(id=2, name="Snapback")

    bucket_hat = Product(id=1, name="Bucket Hat", stock_quantity=2, is_active=True,
                         manufacturer=acme, style=bucket)
    snapback_cap = Product(id=2, name="Snapback Cap", stock_quantity=7, is_active=True,
                           manufacturer=northwind, style=snapback)
    trucker_cap = Product(id=3, name="Trucker Cap", stock_quantity=None, is_active=True,
                          manufacturer=acme)
    visor = Product(id=4, name="Visor", stock_quantity=0, is_active=False)
    beanie = Product(id=5, name="Beanie", stock_quantity=5, is_active=True, manufacturer=blank)

    v1 = ProductVariant(id=1, product=bucket_hat, color=red)
    v2 = ProductVariant(id=2, product=bucket_hat, color=blue)
    v3 = ProductVariant(id=3, product=snapback_cap)
    v4 = ProductVariant(id=4, product=beanie, color=red)
    v5 = ProductVariant(id=5, product=None)

    clerk = Staff(id=1, name="Clerk")

    o1 = Order(id=1, code="ORD-001", status=OrderStatus.DELIVERED,
               created_at=datetime(2026, 4, 14, 10, 0),
               total_amount=Decimal("100.00"), item_count=2)
    o2 = Order(id=2, code="ORD-002", status=OrderStatus.CONFIRMED,
               created_at=datetime(2026, 4, 2, 9, 0),
               total_amount=Decimal("50.50"), item_count=3, staff=clerk)
    o3 = Order(id=3, code="ORD-003", status=OrderStatus.CANCELLED,
               created_at=datetime(2026, 4, 10, 18, 0),
               total_amount=Decimal("1000.00"), item_count=5)

    lines = [
        OrderLine(id=1, order=o1, variant=v1, quantity=3, unit_price=Decimal("25.00")),
        OrderLine(id=2, order=o1, variant=v3, quantity=3, unit_price=Decimal("40.00")),
        OrderLine(id=3, order=o2, variant=v1, quantity=2, unit_price=Decimal("20.00")),
        OrderLine(id=4, order=o2, variant=v2, quantity=3, unit_price=Decimal("25.00")),
        OrderLine(id=5, order=o3, variant=v3, quantity=10, unit_price=Decimal("40.00")),
        OrderLine(id=6, order=o2, variant=v5, quantity=4, unit_price=Decimal("10.00")),
        OrderLine(id=7, order=o1, variant=v4, quantity=1, unit_price=Decimal("15.00")),
    ]

    async with session_factory() as session:
        session.add_all([trucker_cap, visor, *lines])
        await session.commit()

    return SimpleNamespace(
        products=[bucket_hat, snapback_cap, trucker_cap, visor, beanie],
        variants=[v1, v2, v3, v4, v5],
        orders=[o1, o2, o3],
        lines=lines,
    )
