import pytest

from app.services import DashboardService, clamp_limit
from app.services.dashboard_service import SAMPLE_REVENUE_TREND, SAMPLE_TOP_PRODUCTS, SAMPLE_RECENT_ORDERS

from doubles import FakeDashboardRepository


@pytest.mark.asyncio
async def test_metrics():
    metrics = await DashboardService(FakeDashboardRepository()).get_metrics()

    assert metrics == {
        "totalRevenue": 125000.5,
        "totalOrders": 320,
        "totalCustomers": 140,
        "conversionRate": 3.2,
        "averageOrderValue": 390.63,
        "totalProducts": 58,
        "returnRate": 2.5,
        "customerSatisfaction": 4.2,
    }


@pytest.mark.asyncio
async def test_failing_metric_reports_zero():
    repository = FakeDashboardRepository(failing={"get_total_orders", "get_return_rate"})

    metrics = await DashboardService(repository).get_metrics()

    assert metrics["totalOrders"] == 0
    assert metrics["returnRate"] == 0
    assert metrics["totalRevenue"] == 125000.5


@pytest.mark.asyncio
async def test_empty_series_fall_back_to_samples():
    service = DashboardService(FakeDashboardRepository(empty=True))

    assert await service.get_revenue_trend() == SAMPLE_REVENUE_TREND
    assert await service.get_top_products(3) == SAMPLE_TOP_PRODUCTS
    assert await service.get_recent_orders() == SAMPLE_RECENT_ORDERS


@pytest.mark.asyncio
async def test_real_series_are_returned():
    repository = FakeDashboardRepository()
    service = DashboardService(repository)

    orders = await service.get_recent_orders(10)

    assert orders[0]["customer"] == "Ada Lovelace"
    assert repository.limits["recent_orders"] == 10


@pytest.mark.asyncio
async def test_all_dashboard_data_isolates_failing_sections():
    repository = FakeDashboardRepository(failing={"get_sales_by_category", "get_top_products"})

    data = await DashboardService(repository).get_all_dashboard_data()

    assert set(data) == {"metrics", "revenueData", "categoryData", "topProducts", "recentOrders"}
    assert data["categoryData"] == []
    assert data["topProducts"] == []
    assert data["revenueData"][0]["month"] == "Oct"
    assert data["metrics"]["totalOrders"] == 320


@pytest.mark.parametrize("raw, expected", [
    (None, 5),
    ("", 5),
    ("abc", 5),
    ("0", 5),
    ("-3", 5),
    ("7", 7),
    (12, 12),
    ("100", 100),
    ("250", 100),
])
def test_clamp_limit(raw, expected):
    assert clamp_limit(raw) == expected
