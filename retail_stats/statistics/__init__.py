"""
Statistics Module

Sales reports computed in memory from the shop's order, order-line and
product stores.
"""
from .periods import DateWindow, Period, resolve_open_window, resolve_window
from .service import StatisticsService

__all__ = [
    "DateWindow",
    "Period",
    "resolve_open_window",
    "resolve_window",
    "StatisticsService",
]
