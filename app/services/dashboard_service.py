"""
Service for dashboard analytics
Aggregates repository queries with per-section fallbacks
"""
import asyncio
import logging
from typing import Dict, Any, List

from app.repositories import DashboardRepository

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5
MAX_LIMIT = 100

SAMPLE_REVENUE_TREND = [
    {"month": "Jan", "revenue": 12000, "orders": 240},
    {"month": "Feb", "revenue": 15000, "orders": 300},
    {"month": "Mar", "revenue": 18000, "orders": 360},
    {"month": "Apr", "revenue": 16000, "orders": 320},
    {"month": "May", "revenue": 20000, "orders": 400},
    {"month": "Jun", "revenue": 22000, "orders": 440},
    {"month": "Jul", "revenue": 19000, "orders": 380},
    {"month": "Aug", "revenue": 25000, "orders": 500},
    {"month": "Sep", "revenue": 21000, "orders": 420},
]

SAMPLE_CATEGORY_DATA = [
    {"category": "Electronics", "sales": 45000, "orders": 120},
    {"category": "Clothing", "sales": 32000, "orders": 200},
    {"category": "Books", "sales": 18000, "orders": 150},
    {"category": "Home & Garden", "sales": 25000, "orders": 80},
    {"category": "Sports", "sales": 15000, "orders": 60},
]

SAMPLE_TOP_PRODUCTS = [
    {"name": "Wireless Headphones", "revenue": 12000, "sales": 120, "growth": 15.2},
    {"name": "Smart Watch", "revenue": 9500, "sales": 95, "growth": 8.7},
    {"name": "Laptop Stand", "revenue": 7800, "sales": 156, "growth": -2.1},
    {"name": "Bluetooth Speaker", "revenue": 6500, "sales": 130, "growth": 12.3},
    {"name": "Phone Case", "revenue": 4200, "sales": 210, "growth": 5.8},
]

SAMPLE_RECENT_ORDERS = [
    {"id": "ORD-001", "customer": "John Doe", "amount": "299.99", "status": "Delivered"},
    {"id": "ORD-002", "customer": "Jane Smith", "amount": "149.50", "status": "Shipped"},
    {"id": "ORD-003", "customer": "Bob Johnson", "amount": "89.99", "status": "Processing"},
    {"id": "ORD-004", "customer": "Alice Brown", "amount": "199.99", "status": "Delivered"},
    {"id": "ORD-005", "customer": "Charlie Wilson", "amount": "79.99", "status": "Shipped"},
]


def clamp_limit(raw: Any) -> int:
    """Invalid or non-positive → 5, above 100 → 100"""
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    if limit <= 0:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


class DashboardService:
    """Dashboard business logic over DashboardRepository"""

    def __init__(self, repository: DashboardRepository):
        self.repository = repository

    async def get_metrics(self) -> Dict[str, Any]:
        """
        All headline metrics, fetched concurrently

        A metric whose query fails is reported as 0; the others are unaffected.
        """
        logger.info("Fetching dashboard metrics")
        names = [
            "totalRevenue",
            "totalOrders",
            "totalCustomers",
            "conversionRate",
            "averageOrderValue",
            "totalProducts",
            "returnRate",
            "customerSatisfaction",
        ]
        results = await asyncio.gather(
            self.repository.get_total_sales_value(),
            self.repository.get_total_orders(),
            self.repository.get_total_customers(),
            self.repository.get_conversion_rate(),
            self.repository.get_average_order_value(),
            self.repository.get_total_products(),
            self.repository.get_return_rate(),
            self.repository.get_customer_satisfaction(),
            return_exceptions=True
        )

        metrics: Dict[str, Any] = {}
        for name, value in zip(names, results):
            if isinstance(value, Exception):
                logger.warning(f"Metric {name} failed, using 0: {value}")
                value = 0
            metrics[name] = value
        return metrics

    async def get_revenue_trend(self) -> List[Dict[str, Any]]:
        data = await self.repository.get_revenue_trend()
        if not data:
            logger.info("No revenue data, returning sample trend")
            return list(SAMPLE_REVENUE_TREND)
        return data

    async def get_sales_by_category(self) -> List[Dict[str, Any]]:
        data = await self.repository.get_sales_by_category()
        if not data:
            logger.info("No category data, returning sample data")
            return list(SAMPLE_CATEGORY_DATA)
        return data

    async def get_top_products(self, limit: int = DEFAULT_LIMIT) -> List[Dict[str, Any]]:
        logger.info(f"Fetching top {limit} products")
        data = await self.repository.get_top_products(limit)
        if not data:
            return list(SAMPLE_TOP_PRODUCTS)
        return data

    async def get_recent_orders(self, limit: int = DEFAULT_LIMIT) -> List[Dict[str, Any]]:
        logger.info(f"Fetching recent {limit} orders")
        data = await self.repository.get_recent_orders(limit)
        if not data:
            return list(SAMPLE_RECENT_ORDERS)
        return data

    async def get_all_dashboard_data(self) -> Dict[str, Any]:
        """Every section at once; a failing section falls back to its empty value"""
        logger.info("Fetching all dashboard data")
        sections = [
            ("metrics", {}),
            ("revenueData", []),
            ("categoryData", []),
            ("topProducts", []),
            ("recentOrders", []),
        ]
        results = await asyncio.gather(
            self.get_metrics(),
            self.get_revenue_trend(),
            self.get_sales_by_category(),
            self.get_top_products(),
            self.get_recent_orders(),
            return_exceptions=True
        )

        data: Dict[str, Any] = {}
        for (name, fallback), value in zip(sections, results):
            if isinstance(value, Exception):
                logger.warning(f"Dashboard section {name} failed: {value}")
                value = fallback
            data[name] = value
        return data
