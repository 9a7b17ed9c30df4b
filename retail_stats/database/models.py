"""
Database Models - Shop Schema

Relational model of the shop as read by the statistics engine. The schema
consists of:

Sales:
- Order: customer transaction with status, totals and optional staff member
- OrderLine: one product variant sold within an order

Catalog:
- Product: sellable product with stock level and activity flag
- ProductVariant: a concrete configuration of a product (by color)
- Manufacturer, Color, Style: catalog lookups

People:
- Staff: shop employees; an order handled by staff was placed in-store

Every relation the reports walk is nullable on purpose: a broken link in a
row drops that row from the report instead of failing it. Column types are
portable so the same schema runs on PostgreSQL and SQLite.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# ENUMERATIONS
# =============================================================================

class OrderStatus(str, Enum):
    """Order status enumeration, in workflow order"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPING = "shipping"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# =============================================================================
# CATALOG
# =============================================================================

class Manufacturer(Base):
    """Product manufacturer (brand)"""
    __tablename__ = "manufacturers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(200))

    products: Mapped[List["Product"]] = relationship(back_populates="manufacturer")


class Color(Base):
    """Color attribute of a variant"""
    __tablename__ = "colors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Style(Base):
    """Style attribute of a product"""
    __tablename__ = "styles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Product(Base):
    """
    Product Table

    Catalog entry with stock level. ``is_active`` and ``stock_quantity`` are
    nullable; products missing either never show up in low-stock alerts.
    """
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    stock_quantity: Mapped[Optional[int]] = mapped_column(Integer)
    is_active: Mapped[Optional[bool]] = mapped_column(Boolean)

    manufacturer_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("manufacturers.id")
    )
    style_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("styles.id"))

    # Relationships
    manufacturer: Mapped[Optional["Manufacturer"]] = relationship(back_populates="products")
    style: Mapped[Optional["Style"]] = relationship()
    variants: Mapped[List["ProductVariant"]] = relationship(back_populates="product")

    __table_args__ = (
        Index("ix_products_active_stock", "is_active", "stock_quantity"),
    )


class ProductVariant(Base):
    """Sellable configuration of a product"""
    __tablename__ = "product_variants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("products.id"))
    color_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("colors.id"))

    product: Mapped[Optional["Product"]] = relationship(back_populates="variants")
    color: Mapped[Optional["Color"]] = relationship()


# =============================================================================
# PEOPLE
# =============================================================================

class Staff(Base):
    """Shop employee"""
    __tablename__ = "staff"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)


# =============================================================================
# SALES
# =============================================================================

class Order(Base):
    """
    Order Table

    Grain: one row per customer transaction. ``staff_id`` is NULL for orders
    placed online and set for orders rung up in the shop.
    """
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)

    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(OrderStatus), default=OrderStatus.PENDING, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Measures
    total_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    item_count: Mapped[Optional[int]] = mapped_column(Integer)

    staff_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("staff.id"))

    # Relationships
    staff: Mapped[Optional["Staff"]] = relationship()
    lines: Mapped[List["OrderLine"]] = relationship(back_populates="order")

    __table_args__ = (
        Index("ix_orders_status", "status"),
        Index("ix_orders_created_at", "created_at"),
        Index("ix_orders_staff", "staff_id"),
    )


class OrderLine(Base):
    """
    Order Line Table

    Grain: one row per product variant within an order.
    """
    __tablename__ = "order_lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(Integer, ForeignKey("orders.id"), nullable=False)
    variant_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("product_variants.id")
    )

    # Measures
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="lines")
    variant: Mapped[Optional["ProductVariant"]] = relationship()

    __table_args__ = (
        Index("ix_order_lines_order", "order_id"),
        Index("ix_order_lines_variant", "variant_id"),
    )
