"""
Report Aggregation

Pure functions that turn fetched rows into report records. Nothing here
performs I/O or mutates its input; rows are read through attributes so ORM
instances and plain objects work alike.

Grouping reports share one shape: an insertion-ordered mapping from key to a
mutable accumulator (first row seen for a key fixes its descriptive fields,
later rows only add quantities), then a stable sort and truncation, then
conversion to immutable records.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

import structlog

from retail_stats.database.models import OrderStatus
from retail_stats.statistics.periods import first_of_next_month, start_of_week
from retail_stats.statistics.schemas import (
    BestSellingProduct,
    BrandStatistics,
    ChannelStatistics,
    LowStockProduct,
    OrderStatusStatistics,
    PeriodStatistics,
    WeeklyRevenue,
)

logger = structlog.get_logger(__name__)

ZERO = Decimal("0")

DEFAULT_LOW_STOCK_THRESHOLD = 5
DEFAULT_LOW_STOCK_LIMIT = 10

ALL_TIME_PERIOD = "all"

# Display order of the status distribution
STATUS_DISPLAY = [
    (OrderStatus.PENDING, "Pending confirmation", "#f472b6"),
    (OrderStatus.CONFIRMED, "Awaiting shipment", "#fbbf24"),
    (OrderStatus.SHIPPING, "Shipping", "#14b8a6"),
    (OrderStatus.DELIVERED, "Completed", "#a855f7"),
    (OrderStatus.CANCELLED, "Cancelled", "#ef4444"),
]

ONLINE_CHANNEL = ("Online", "#f472b6")
IN_STORE_CHANNEL = ("In-store", "#3b82f6")


def _name(entity) -> Optional[str]:
    return entity.name if entity is not None else None


def _amount(value) -> Decimal:
    return value if value is not None else ZERO


# =============================================================================
# BEST SELLERS / BRANDS
# =============================================================================

@dataclass
class _VariantSales:
    variant_id: int
    product_id: int
    product_name: str
    color: Optional[str]
    style: Optional[str]
    unit_price: Decimal
    quantity: int = 0


@dataclass
class _BrandSales:
    manufacturer_id: int
    manufacturer_name: str
    quantity: int = 0


def aggregate_best_sellers(lines: Iterable, limit: int) -> List[BestSellingProduct]:
    """
    Rank product variants by units sold.

    Rows without a variant, or whose variant has no product, are skipped.
    Color, style and unit price come from the first row seen for a variant.
    Ties keep the order in which variants were first seen.
    """
    groups: Dict[int, _VariantSales] = {}
    processed = skipped = 0

    for line in lines:
        processed += 1
        variant = line.variant if line is not None else None
        product = variant.product if variant is not None else None
        if product is None:
            skipped += 1
            continue

        sales = groups.get(variant.id)
        if sales is None:
            sales = groups[variant.id] = _VariantSales(
                variant_id=variant.id,
                product_id=product.id,
                product_name=product.name,
                color=_name(variant.color),
                style=_name(product.style),
                unit_price=line.unit_price,
            )
        sales.quantity += line.quantity or 0

    ranked = sorted(groups.values(), key=lambda s: s.quantity, reverse=True)[: max(limit, 0)]
    logger.debug(
        "Best sellers aggregated",
        processed=processed,
        skipped=skipped,
        variants=len(groups),
        returned=len(ranked),
    )
    return [
        BestSellingProduct(
            variant_id=s.variant_id,
            product_id=s.product_id,
            product_name=s.product_name,
            color=s.color,
            style=s.style,
            unit_price=s.unit_price,
            quantity_sold=s.quantity,
        )
        for s in ranked
    ]


def aggregate_brands(lines: Iterable, limit: int) -> List[BrandStatistics]:
    """
    Rank manufacturers by units bought.

    Rows are skipped when any link of line -> variant -> product ->
    manufacturer is missing or the manufacturer has a blank name.
    """
    groups: Dict[int, _BrandSales] = {}
    processed = skipped = 0

    for line in lines:
        processed += 1
        variant = line.variant if line is not None else None
        product = variant.product if variant is not None else None
        manufacturer = product.manufacturer if product is not None else None
        if manufacturer is None or not (manufacturer.name or "").strip():
            skipped += 1
            continue

        sales = groups.get(manufacturer.id)
        if sales is None:
            sales = groups[manufacturer.id] = _BrandSales(
                manufacturer_id=manufacturer.id,
                manufacturer_name=manufacturer.name,
            )
        sales.quantity += line.quantity or 0

    ranked = sorted(groups.values(), key=lambda s: s.quantity, reverse=True)[: max(limit, 0)]
    logger.debug(
        "Brands aggregated",
        processed=processed,
        skipped=skipped,
        brands=len(groups),
        returned=len(ranked),
    )
    return [
        BrandStatistics(
            manufacturer_id=s.manufacturer_id,
            manufacturer_name=s.manufacturer_name,
            total_quantity=s.quantity,
        )
        for s in ranked
    ]


# =============================================================================
# REVENUE
# =============================================================================

def summarize_orders(orders: Sequence, period: str) -> PeriodStatistics:
    """Revenue, units and order count of already filtered orders. Missing amounts count as zero."""
    revenue = sum((_amount(o.total_amount) for o in orders), ZERO)
    units = sum(o.item_count or 0 for o in orders)
    return PeriodStatistics(revenue=revenue, units_sold=units, orders=len(orders), period=period)


def summarize_all_time(orders: Sequence) -> PeriodStatistics:
    """All-time revenue and order count. Units are not tracked for this report and stay 0."""
    revenue = sum((_amount(o.total_amount) for o in orders), ZERO)
    return PeriodStatistics(revenue=revenue, units_sold=0, orders=len(orders), period=ALL_TIME_PERIOD)


def partition_month_weeks(month_day: date, orders: Sequence) -> List[WeeklyRevenue]:
    """
    Split the month containing ``month_day`` into Monday-Sunday buckets.

    The first bucket starts on the 1st and the last one ends on the month's
    last day, so buckets at either end can be shorter than a week. An order
    belongs to the bucket whose dates (inclusive) contain its creation date.
    """
    month_start = month_day.replace(day=1)
    month_end = first_of_next_month(month_day)
    last_day = month_end - timedelta(days=1)

    dated = [(o.created_at.date(), o) for o in orders if o.created_at is not None]

    weeks: List[WeeklyRevenue] = []
    cursor = month_start
    while cursor < month_end:
        week_start = max(start_of_week(cursor), month_start)
        week_end = min(week_start + timedelta(days=7 - week_start.isoweekday()), last_day)
        if week_start > week_end:
            break

        in_week = [o for day, o in dated if week_start <= day <= week_end]
        weeks.append(
            WeeklyRevenue(
                label=f"Week {len(weeks) + 1}",
                start_date=week_start,
                end_date=week_end,
                revenue=sum((_amount(o.total_amount) for o in in_week), ZERO),
                orders=len(in_week),
            )
        )
        cursor = week_end + timedelta(days=1)

    return weeks


# =============================================================================
# DISTRIBUTIONS
# =============================================================================

def count_statuses(orders: Iterable) -> List[OrderStatusStatistics]:
    """Order count for each status, always all five in display order."""
    counts = {status: 0 for status, _, _ in STATUS_DISPLAY}
    for order in orders:
        if order is not None and order.status in counts:
            counts[order.status] += 1

    return [
        OrderStatusStatistics(label=label, count=counts[status], color=color, status_code=status.name)
        for status, label, color in STATUS_DISPLAY
    ]


def empty_status_distribution() -> List[OrderStatusStatistics]:
    return count_statuses([])


def channel_split(online: Optional[int], in_store: Optional[int]) -> List[ChannelStatistics]:
    """Online and in-store order counts, both always present."""
    return [
        ChannelStatistics(channel=ONLINE_CHANNEL[0], count=online or 0, color=ONLINE_CHANNEL[1]),
        ChannelStatistics(channel=IN_STORE_CHANNEL[0], count=in_store or 0, color=IN_STORE_CHANNEL[1]),
    ]


# =============================================================================
# STOCK
# =============================================================================

def normalize_threshold(threshold: Optional[int]) -> int:
    return DEFAULT_LOW_STOCK_THRESHOLD if threshold is None or threshold < 0 else threshold


def normalize_limit(limit: Optional[int]) -> int:
    return DEFAULT_LOW_STOCK_LIMIT if limit is None or limit <= 0 else limit


def filter_low_stock(products: Iterable, threshold: int, limit: int) -> List[LowStockProduct]:
    """
    Active products with stock at or below ``threshold``, lowest stock first.

    Products with unknown stock or activity are left out.
    """
    candidates = [
        p for p in products
        if p.is_active is True and p.stock_quantity is not None and p.stock_quantity <= threshold
    ]
    candidates.sort(key=lambda p: p.stock_quantity)
    return [
        LowStockProduct(product_id=p.id, product_name=p.name, stock_quantity=p.stock_quantity)
        for p in candidates[:limit]
    ]
