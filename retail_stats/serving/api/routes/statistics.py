"""
Statistics API Endpoints

REST API exposing the sales reports for the back-office dashboard.
Reports never fail: a broken query answers with an empty or zeroed body.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from retail_stats.config import get_settings
from retail_stats.database.connection import get_read_only_db_dependency
from retail_stats.statistics import StatisticsService
from retail_stats.statistics.schemas import (
    BestSellingProduct,
    BrandStatistics,
    ChannelStatistics,
    LowStockProduct,
    OrderStatusStatistics,
    PeriodStatistics,
    WeeklyRevenue,
)

router = APIRouter()
logger = structlog.get_logger(__name__)
settings = get_settings()


class OrderCounts(BaseModel):
    """Order totals"""
    total: int
    excluding_cancelled: int


async def get_statistics_service(
    db: AsyncSession = Depends(get_read_only_db_dependency),
) -> StatisticsService:
    """Statistics service bound to the request's read-only session."""
    return StatisticsService.from_session(
        db, fallback_lookback_years=settings.statistics.fallback_lookback_years
    )


@router.get("/best-selling", response_model=List[BestSellingProduct])
async def best_selling_products(
    limit: Optional[int] = Query(None, ge=1, le=100),
    service: StatisticsService = Depends(get_statistics_service),
) -> List[BestSellingProduct]:
    """Best-selling product variants of all time."""
    limit = limit or settings.statistics.best_sellers_limit
    logger.info("best_selling_products called", limit=limit)
    return await service.get_best_selling_products(limit)


@router.get("/period", response_model=PeriodStatistics)
async def period_statistics(
    period: str = Query("month", description="day, week, month, year, lastmonth or lastyear"),
    service: StatisticsService = Depends(get_statistics_service),
) -> PeriodStatistics:
    """Revenue, units sold and orders within a period."""
    logger.info("period_statistics called", period=period)
    return await service.get_period_statistics(period)


@router.get("/total", response_model=PeriodStatistics)
async def total_statistics(
    service: StatisticsService = Depends(get_statistics_service),
) -> PeriodStatistics:
    """Revenue and orders of all time."""
    return await service.get_total_statistics()


@router.get("/weekly-revenue", response_model=List[WeeklyRevenue])
async def weekly_revenue(
    service: StatisticsService = Depends(get_statistics_service),
) -> List[WeeklyRevenue]:
    """Revenue of the current month, week by week."""
    return await service.get_weekly_revenue_for_month()


@router.get("/top-brands", response_model=List[BrandStatistics])
async def top_brands(
    limit: Optional[int] = Query(None, ge=1, le=100),
    service: StatisticsService = Depends(get_statistics_service),
) -> List[BrandStatistics]:
    """Manufacturers ranked by units bought."""
    return await service.get_top_brands(limit or settings.statistics.top_brands_limit)


@router.get("/order-status", response_model=List[OrderStatusStatistics])
async def order_status_statistics(
    period: str = Query("month", description="day, week, month or year"),
    service: StatisticsService = Depends(get_statistics_service),
) -> List[OrderStatusStatistics]:
    """Order count per status within a period."""
    logger.info("order_status_statistics called", period=period)
    return await service.get_order_status_statistics(period)


@router.get("/channels", response_model=List[ChannelStatistics])
async def channel_statistics(
    service: StatisticsService = Depends(get_statistics_service),
) -> List[ChannelStatistics]:
    """Online against in-store orders."""
    return await service.get_channel_statistics()


@router.get("/low-stock", response_model=List[LowStockProduct])
async def low_stock_products(
    threshold: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    service: StatisticsService = Depends(get_statistics_service),
) -> List[LowStockProduct]:
    """Active products running out of stock."""
    if threshold is None:
        threshold = settings.statistics.low_stock_threshold
    if limit is None:
        limit = settings.statistics.low_stock_limit
    return await service.get_low_stock_products(threshold, limit)


@router.get("/orders/count", response_model=OrderCounts)
async def order_counts(
    service: StatisticsService = Depends(get_statistics_service),
) -> OrderCounts:
    """Number of orders, with and without cancelled ones."""
    return OrderCounts(
        total=await service.get_total_order_count(),
        excluding_cancelled=await service.get_total_order_count_excluding_cancelled(),
    )
