from decimal import Decimal

import pytest

from app.repositories import DashboardRepository

from doubles import FakeEngine, FakeResult


@pytest.mark.asyncio
async def test_metric_scalars_are_coerced():
    engine = FakeEngine(lambda sql, params: FakeResult([{"value": Decimal("1234.50")}]))
    repository = DashboardRepository(engine)

    assert await repository.get_total_sales_value() == 1234.5
    assert await repository.get_total_orders() == 1234
    assert engine.checkouts == engine.releases == 2


@pytest.mark.asyncio
async def test_missing_metric_is_zero():
    repository = DashboardRepository(FakeEngine(lambda sql, params: FakeResult([{"value": None}])))

    assert await repository.get_customer_satisfaction() == 0.0


@pytest.mark.asyncio
async def test_recent_orders_shape():
    seen = []

    def respond(sql, params):
        seen.append(params)
        return FakeResult([
            {"id": 41, "customer": "Ada Lovelace", "amount": Decimal("89.9"), "status": "shipped", "created_at": None},
            {"id": 40, "customer": "Alan Turing", "amount": None, "status": "in transit", "created_at": None},
        ])

    orders = await DashboardRepository(FakeEngine(respond)).get_recent_orders(2)

    assert seen == [{"limit": 2}]
    assert orders == [
        {"id": 41, "customer": "Ada Lovelace", "amount": "89.90", "status": "Shipped"},
        {"id": 40, "customer": "Alan Turing", "amount": "0.00", "status": "In transit"},
    ]


@pytest.mark.asyncio
async def test_top_products_shape():
    repository = DashboardRepository(FakeEngine(lambda sql, params: FakeResult([
        {"name": "Desk Lamp", "revenue": Decimal("500"), "sales": Decimal("20"), "growth": None},
    ])))

    products = await repository.get_top_products(1)

    assert products == [{"name": "Desk Lamp", "revenue": 500.0, "sales": 20, "growth": 0.0}]
