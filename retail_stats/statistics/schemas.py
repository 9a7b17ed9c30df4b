"""
Report Records

Immutable value records produced by the statistics engine. They are built
fresh on every call and double as the API response models.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ReportRecord(BaseModel):
    """Base for all report records"""
    model_config = ConfigDict(frozen=True)


class BestSellingProduct(ReportRecord):
    """Sales of one product variant across all non-cancelled orders"""
    variant_id: int
    product_id: int
    product_name: str
    color: Optional[str] = None
    style: Optional[str] = None
    unit_price: Decimal
    quantity_sold: int


class BrandStatistics(ReportRecord):
    """Units bought per manufacturer"""
    manufacturer_id: int
    manufacturer_name: str
    total_quantity: int


class PeriodStatistics(ReportRecord):
    """Revenue, units sold and order count over a period"""
    revenue: Decimal
    units_sold: int
    orders: int
    period: str


class WeeklyRevenue(ReportRecord):
    """One Monday-to-Sunday slice of the current month"""
    label: str
    start_date: date
    end_date: date
    revenue: Decimal
    orders: int


class OrderStatusStatistics(ReportRecord):
    """Number of orders in one status"""
    label: str
    count: int
    color: str
    status_code: str


class ChannelStatistics(ReportRecord):
    """Number of orders per sales channel"""
    channel: str
    count: int
    color: str


class LowStockProduct(ReportRecord):
    """Active product running out of stock"""
    product_id: int
    product_name: str
    stock_quantity: int
