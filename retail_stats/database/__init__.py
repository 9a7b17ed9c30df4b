"""
Database Module
"""
from .connection import (
    init_database,
    close_database,
    get_read_only_db,
    get_read_only_db_dependency,
    check_database_health,
)
from .models import Base, OrderStatus
from .repositories import OrderRepository, OrderLineRepository, ProductRepository

__all__ = [
    "init_database",
    "close_database",
    "get_read_only_db",
    "get_read_only_db_dependency",
    "check_database_health",
    "Base",
    "OrderStatus",
    "OrderRepository",
    "OrderLineRepository",
    "ProductRepository",
]
