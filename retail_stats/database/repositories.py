"""
Repositories

Read access to the order, order-line and product stores. Each repository
wraps one AsyncSession; all relationships the reports walk are eagerly
loaded because lazy loading is not available under asyncio.
"""

from datetime import datetime
from typing import List, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from retail_stats.database.models import (
    Order,
    OrderLine,
    OrderStatus,
    Product,
    ProductVariant,
)


def _product_details_joined():
    """Eager-load line -> variant -> (color, product -> (style, manufacturer)) with JOINs."""
    variant = joinedload(OrderLine.variant)
    product = variant.joinedload(ProductVariant.product)
    return [
        variant.joinedload(ProductVariant.color),
        product.joinedload(Product.style),
        product.joinedload(Product.manufacturer),
    ]


def _product_details_selectin():
    """Same graph as ``_product_details_joined`` loaded with per-level SELECT ... IN."""
    variant = selectinload(OrderLine.variant)
    product = variant.selectinload(ProductVariant.product)
    return [
        variant.selectinload(ProductVariant.color),
        product.selectinload(Product.style),
        product.selectinload(Product.manufacturer),
    ]


class OrderRepository:
    """Queries against the order store."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_created_between(self, start: datetime, end: datetime) -> Sequence[Order]:
        """Orders created in ``[start, end)``, any status."""
        result = await self.session.execute(
            select(Order)
            .where(Order.created_at >= start, Order.created_at < end)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return result.scalars().all()

    async def find_created_between_excluding_cancelled(
        self, start: datetime, end: datetime
    ) -> Sequence[Order]:
        """Orders created in ``[start, end)`` that were not cancelled."""
        result = await self.session.execute(
            select(Order)
            .where(
                Order.created_at >= start,
                Order.created_at < end,
                Order.status != OrderStatus.CANCELLED,
            )
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return result.scalars().all()

    async def find_all(self) -> Sequence[Order]:
        result = await self.session.execute(
            select(Order).order_by(Order.created_at.desc(), Order.id.desc())
        )
        return result.scalars().all()

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(Order.id)))
        return result.scalar_one()

    async def count_excluding_cancelled(self) -> int:
        result = await self.session.execute(
            select(func.count(Order.id)).where(Order.status != OrderStatus.CANCELLED)
        )
        return result.scalar_one()

    async def count_without_staff(self) -> int:
        """Orders placed online."""
        result = await self.session.execute(
            select(func.count(Order.id)).where(Order.staff_id.is_(None))
        )
        return result.scalar_one()

    async def count_with_staff(self) -> int:
        """Orders placed in the shop."""
        result = await self.session.execute(
            select(func.count(Order.id)).where(Order.staff_id.is_not(None))
        )
        return result.scalar_one()


class OrderLineRepository:
    """Queries against the order-line store, with the product graph loaded."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_with_product_details_excluding_cancelled(self) -> List[OrderLine]:
        """All lines of non-cancelled orders, product graph loaded with JOINs."""
        result = await self.session.execute(
            select(OrderLine)
            .join(OrderLine.order)
            .where(Order.status != OrderStatus.CANCELLED)
            .options(*_product_details_joined())
            .order_by(OrderLine.id)
        )
        return list(result.scalars().all())

    async def find_with_product_details_excluding_cancelled_backup(self) -> List[OrderLine]:
        """
        Same rows as ``find_with_product_details_excluding_cancelled``.

        Filters through an explicit outer join on the order table and loads the
        product graph with separate SELECT ... IN statements, so a problem in
        one join strategy does not take the report down with it.
        """
        result = await self.session.execute(
            select(OrderLine)
            .outerjoin(Order, Order.id == OrderLine.order_id)
            .where(Order.id.is_not(None), Order.status != OrderStatus.CANCELLED)
            .options(*_product_details_selectin())
            .order_by(OrderLine.id)
        )
        return list(result.scalars().all())

    async def find_with_all_details(self) -> List[OrderLine]:
        """Every line regardless of order status."""
        result = await self.session.execute(
            select(OrderLine)
            .options(selectinload(OrderLine.order), *_product_details_selectin())
            .order_by(OrderLine.id)
        )
        return list(result.scalars().all())

    async def find_with_product_details_between(
        self, start: datetime, end: datetime
    ) -> List[OrderLine]:
        """Lines of non-cancelled orders created in ``[start, end)``."""
        result = await self.session.execute(
            select(OrderLine)
            .join(OrderLine.order)
            .where(
                Order.status != OrderStatus.CANCELLED,
                Order.created_at >= start,
                Order.created_at < end,
            )
            .options(*_product_details_joined())
            .order_by(OrderLine.id)
        )
        return list(result.scalars().all())


class ProductRepository:
    """Queries against the product store."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_low_stock_candidates(self, threshold: int) -> List[Product]:
        """Active products whose known stock is at or below ``threshold``."""
        result = await self.session.execute(
            select(Product)
            .where(
                Product.is_active.is_(True),
                Product.stock_quantity.is_not(None),
                Product.stock_quantity <= threshold,
            )
            .order_by(Product.stock_quantity, Product.id)
        )
        return list(result.scalars().all())
