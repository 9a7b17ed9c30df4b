"""
Unit Tests - Statistics API
"""
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace as Row
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from retail_stats.database.models import OrderStatus
from retail_stats.serving.api import create_api_app
from retail_stats.serving.api.routes.statistics import get_statistics_service
from retail_stats.statistics import StatisticsService

NOW = datetime(2026, 4, 15, 12, 0)


@pytest.fixture
def stores():
    """Mocked repositories behind the service."""
    return Row(orders=AsyncMock(), order_lines=AsyncMock(), products=AsyncMock())


@pytest.fixture
def client(stores):
    app = create_api_app()
    app.dependency_overrides[get_statistics_service] = lambda: StatisticsService(
        stores.orders, stores.order_lines, stores.products, clock=lambda: NOW
    )
    with TestClient(app) as test_client:
        yield test_client


def test_period_statistics(client, stores):
    stores.orders.find_created_between_excluding_cancelled.return_value = [
        Row(total_amount=Decimal("100.00"), item_count=2),
        Row(total_amount=Decimal("50.50"), item_count=3),
    ]

    response = client.get("/api/v1/statistics/period", params={"period": "month"})

    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["revenue"]) == Decimal("150.50")
    assert body["units_sold"] == 5
    assert body["orders"] == 2
    assert body["period"] == "month"
    stores.orders.find_created_between_excluding_cancelled.assert_awaited_once_with(
        datetime(2026, 4, 1), datetime(2026, 5, 1)
    )


def test_unknown_period_is_echoed(client, stores):
    stores.orders.find_created_between_excluding_cancelled.return_value = []

    body = client.get("/api/v1/statistics/period", params={"period": "bogus"}).json()

    assert body["period"] == "bogus"
    assert body["orders"] == 0


def test_period_failure_returns_zeroes(client, stores):
    stores.orders.find_created_between_excluding_cancelled.side_effect = RuntimeError("down")

    response = client.get("/api/v1/statistics/period", params={"period": "week"})

    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["revenue"]) == 0
    assert (body["orders"], body["period"]) == (0, "week")


def test_order_status_always_lists_every_status(client, stores):
    stores.orders.find_created_between.return_value = [
        Row(status=OrderStatus.CANCELLED),
        Row(status=OrderStatus.DELIVERED),
    ]

    body = client.get("/api/v1/statistics/order-status").json()

    assert [s["status_code"] for s in body] == [
        "PENDING", "CONFIRMED", "SHIPPING", "DELIVERED", "CANCELLED",
    ]
    assert [s["count"] for s in body] == [0, 0, 0, 1, 1]


def test_low_stock_uses_configured_defaults(client, stores):
    stores.products.find_low_stock_candidates.return_value = [
        Row(id=1, name="Bucket Hat", stock_quantity=2, is_active=True),
    ]

    body = client.get("/api/v1/statistics/low-stock").json()

    assert body == [{"product_id": 1, "product_name": "Bucket Hat", "stock_quantity": 2}]
    stores.products.find_low_stock_candidates.assert_awaited_once_with(5)


def test_low_stock_negative_threshold_is_replaced(client, stores):
    stores.products.find_low_stock_candidates.return_value = []

    client.get("/api/v1/statistics/low-stock", params={"threshold": -1})

    stores.products.find_low_stock_candidates.assert_awaited_once_with(5)


def test_best_selling_rejects_out_of_range_limit(client):
    assert client.get("/api/v1/statistics/best-selling", params={"limit": 0}).status_code == 422


def test_best_selling_failure_returns_empty_list(client, stores):
    stores.order_lines.find_with_product_details_excluding_cancelled.side_effect = RuntimeError("a")
    stores.order_lines.find_with_product_details_between.side_effect = RuntimeError("b")

    response = client.get("/api/v1/statistics/best-selling")

    assert response.status_code == 200
    assert response.json() == []


def test_channels(client, stores):
    stores.orders.count_without_staff.return_value = 2
    stores.orders.count_with_staff.return_value = 1

    body = client.get("/api/v1/statistics/channels").json()

    assert [(c["channel"], c["count"]) for c in body] == [("Online", 2), ("In-store", 1)]


def test_order_counts(client, stores):
    stores.orders.count.return_value = 3
    stores.orders.count_excluding_cancelled.return_value = 2

    body = client.get("/api/v1/statistics/orders/count").json()

    assert body == {"total": 3, "excluding_cancelled": 2}


def test_request_id_header(client, stores):
    stores.orders.count_without_staff.return_value = 0
    stores.orders.count_with_staff.return_value = 0

    response = client.get("/api/v1/statistics/channels", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"
    assert "X-Response-Time" in response.headers


def test_liveness(client):
    assert client.get("/api/v1/health/live").json() == {"status": "alive"}
