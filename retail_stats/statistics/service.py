"""
Statistics Service

Entry point of the statistics engine. Each public coroutine resolves its
date window, fetches rows from the repositories, hands them to the pure
aggregators and returns report records. No public report raises: failures
are logged and answered with the report's empty or zeroed shape.
"""

from datetime import datetime
from typing import Callable, List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from retail_stats.database.repositories import (
    OrderLineRepository,
    OrderRepository,
    ProductRepository,
)
from retail_stats.statistics import aggregators
from retail_stats.statistics.fallback import FetchStep, run_fetch_chain, soft_fail
from retail_stats.statistics.periods import (
    Period,
    PeriodLike,
    month_bounds,
    resolve_open_window,
    resolve_window,
    shift_years,
    start_of_day,
)
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

Clock = Callable[[], datetime]

DEFAULT_BEST_SELLERS_LIMIT = 10
DEFAULT_TOP_BRANDS_LIMIT = 3


def _period_label(period: PeriodLike) -> str:
    """The period as the caller asked for it."""
    if isinstance(period, Period):
        return period.value
    if period is None:
        return Period.MONTH.value
    return str(period)


def _empty_list(*args, **kwargs) -> list:
    return []


def _zero(*args, **kwargs) -> int:
    return 0


def _zero_period(self, period: PeriodLike = "month") -> PeriodStatistics:
    return PeriodStatistics(revenue=aggregators.ZERO, units_sold=0, orders=0, period=_period_label(period))


def _zero_totals(*args, **kwargs) -> PeriodStatistics:
    return aggregators.summarize_all_time([])


def _zero_statuses(*args, **kwargs) -> List[OrderStatusStatistics]:
    return aggregators.empty_status_distribution()


def _zero_channels(*args, **kwargs) -> List[ChannelStatistics]:
    return aggregators.channel_split(0, 0)


class StatisticsService:
    """
    Sales statistics over the order, order-line and product stores.

    Args:
        orders: Order store
        order_lines: Order-line store
        products: Product store
        clock: Returns "now"; injected so windows are reproducible
        fallback_lookback_years: Span of the date-bounded best-sellers fallback
    """

    def __init__(
        self,
        orders: OrderRepository,
        order_lines: OrderLineRepository,
        products: ProductRepository,
        clock: Clock = datetime.now,
        fallback_lookback_years: int = 1,
    ):
        self.orders = orders
        self.order_lines = order_lines
        self.products = products
        self.clock = clock
        self.fallback_lookback_years = fallback_lookback_years

    @classmethod
    def from_session(cls, session: AsyncSession, **kwargs) -> "StatisticsService":
        """Build a service whose repositories share one session."""
        return cls(
            OrderRepository(session),
            OrderLineRepository(session),
            ProductRepository(session),
            **kwargs,
        )

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    def _best_seller_steps(self) -> List[FetchStep]:
        now = self.clock()
        since = shift_years(now, -self.fallback_lookback_years)

        async def trailing_year():
            return await self.order_lines.find_with_product_details_between(since, now)

        return [
            FetchStep(
                "primary",
                self.order_lines.find_with_product_details_excluding_cancelled,
                on_empty="backup",
                on_error="date_bounded",
            ),
            FetchStep(
                "backup",
                self.order_lines.find_with_product_details_excluding_cancelled_backup,
                on_empty="diagnostic",
                on_error="diagnostic",
            ),
            FetchStep(
                "diagnostic",
                self.order_lines.find_with_all_details,
                diagnostic=True,
            ),
            FetchStep("date_bounded", trailing_year),
        ]

    @soft_fail(_empty_list)
    async def get_best_selling_products(
        self, limit: int = DEFAULT_BEST_SELLERS_LIMIT
    ) -> List[BestSellingProduct]:
        """Top ``limit`` product variants by units sold over all non-cancelled orders."""
        lines = await run_fetch_chain(self._best_seller_steps(), report="best_sellers")
        if not lines:
            logger.info("No order lines for best sellers")
            return []
        return aggregators.aggregate_best_sellers(lines, limit)

    @soft_fail(_empty_list)
    async def get_top_brands(self, limit: int = DEFAULT_TOP_BRANDS_LIMIT) -> List[BrandStatistics]:
        """Top ``limit`` manufacturers by units bought over all non-cancelled orders."""
        lines = await self.order_lines.find_with_product_details_excluding_cancelled()
        logger.debug("Order lines fetched for brands", rows=len(lines))
        return aggregators.aggregate_brands(lines, limit)

    @soft_fail(_empty_list)
    async def get_low_stock_products(
        self, threshold: Optional[int] = None, limit: Optional[int] = None
    ) -> List[LowStockProduct]:
        """Active products at or below ``threshold`` units, lowest first."""
        threshold = aggregators.normalize_threshold(threshold)
        limit = aggregators.normalize_limit(limit)
        candidates = await self.products.find_low_stock_candidates(threshold)
        result = aggregators.filter_low_stock(candidates, threshold, limit)
        logger.info("Low stock products computed", threshold=threshold, limit=limit, found=len(result))
        return result

    # -------------------------------------------------------------------------
    # Revenue
    # -------------------------------------------------------------------------

    @soft_fail(_zero_period)
    async def get_period_statistics(self, period: PeriodLike = "month") -> PeriodStatistics:
        """Revenue, units sold and order count of non-cancelled orders in ``period``."""
        window = resolve_window(period, self.clock())
        orders = await self.orders.find_created_between_excluding_cancelled(window.start, window.end)
        stats = aggregators.summarize_orders(orders, _period_label(period))
        logger.info(
            "Period statistics computed",
            period=period,
            start=window.start.isoformat(),
            end=window.end.isoformat(),
            orders=stats.orders,
            revenue=str(stats.revenue),
        )
        return stats

    @soft_fail(_zero_totals)
    async def get_total_statistics(self) -> PeriodStatistics:
        """Revenue and order count of every order, cancelled ones included."""
        orders = await self.orders.find_all()
        return aggregators.summarize_all_time(orders)

    @soft_fail(_empty_list)
    async def get_weekly_revenue_for_month(self) -> List[WeeklyRevenue]:
        """Revenue and order count of the current month, week by week."""
        today = self.clock().date()
        month_start, next_month_start = month_bounds(today)
        orders = await self.orders.find_created_between_excluding_cancelled(
            start_of_day(month_start), start_of_day(next_month_start)
        )
        weeks = aggregators.partition_month_weeks(today, orders)
        logger.debug("Weekly revenue computed", month=month_start.isoformat(), weeks=len(weeks), orders=len(orders))
        return weeks

    # -------------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------------

    @soft_fail(_zero_statuses)
    async def get_order_status_statistics(self, period: PeriodLike = "month") -> List[OrderStatusStatistics]:
        """Orders per status in ``period``; cancelled orders are counted too."""
        window = resolve_open_window(period, self.clock())
        orders = await self.orders.find_created_between(window.start, window.end)
        return aggregators.count_statuses(orders)

    @soft_fail(_zero_channels)
    async def get_channel_statistics(self) -> List[ChannelStatistics]:
        """Online orders (no staff) against in-store orders (staff assigned)."""
        online = await self.orders.count_without_staff()
        in_store = await self.orders.count_with_staff()
        return aggregators.channel_split(online, in_store)

    @soft_fail(_zero)
    async def get_total_order_count(self) -> int:
        return await self.orders.count()

    @soft_fail(_zero)
    async def get_total_order_count_excluding_cancelled(self) -> int:
        return await self.orders.count_excluding_cancelled()
