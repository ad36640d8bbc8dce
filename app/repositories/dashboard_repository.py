"""
Repository for dashboard analytics
Fixed parameterized read queries against the primary database
"""
import logging
from typing import List, Dict, Any, Optional

from sqlalchemy import text as sqltext
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

COMPLETED_STATUSES = "('delivered', 'shipped', 'completed')"


class DashboardRepository:
    """Plain SQL aggregations; each method checks out its own connection"""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def _scalar(self, sql: str, params: Optional[dict] = None) -> Any:
        async with self.engine.connect() as conn:
            rs = await conn.execute(sqltext(sql), params or {})
            return rs.scalar()

    async def _rows(self, sql: str, params: Optional[dict] = None) -> List[Dict[str, Any]]:
        async with self.engine.connect() as conn:
            rs = await conn.execute(sqltext(sql), params or {})
            return [dict(row) for row in rs.mappings().all()]

    # ============================================
    # METRICS
    # ============================================

    async def get_total_sales_value(self) -> float:
        value = await self._scalar(f"""
            SELECT COALESCE(SUM(total_amount), 0) AS total_sales_value
            FROM orders
            WHERE status IN {COMPLETED_STATUSES}
        """)
        return float(value or 0)

    async def get_total_orders(self) -> int:
        value = await self._scalar("""
            SELECT COUNT(*) AS total_orders
            FROM orders
            WHERE created_at >= DATE_TRUNC('month', CURRENT_DATE)
        """)
        return int(value or 0)

    async def get_total_customers(self) -> int:
        value = await self._scalar("""
            SELECT COUNT(DISTINCT customer_id) AS total_customers
            FROM orders
        """)
        return int(value or 0)

    async def get_conversion_rate(self) -> float:
        """Share of this month's orders that were delivered, in percent"""
        value = await self._scalar("""
            SELECT
                CASE
                    WHEN COUNT(*) > 0
                    THEN ROUND((COUNT(CASE WHEN status = 'delivered' THEN 1 END)::FLOAT / COUNT(*) * 100)::NUMERIC, 2)
                    ELSE 0
                END AS conversion_rate
            FROM orders
            WHERE created_at >= DATE_TRUNC('month', CURRENT_DATE)
        """)
        return float(value or 0)

    async def get_average_order_value(self) -> float:
        value = await self._scalar("""
            SELECT COALESCE(AVG(total_amount), 0) AS avg_order_value
            FROM orders
            WHERE created_at >= DATE_TRUNC('month', CURRENT_DATE)
        """)
        return float(value or 0)

    async def get_total_products(self) -> int:
        value = await self._scalar("SELECT COUNT(*) AS total_products FROM products")
        return int(value or 0)

    async def get_return_rate(self) -> float:
        value = await self._scalar("""
            SELECT
                CASE
                    WHEN COUNT(*) > 0
                    THEN (COUNT(CASE WHEN status = 'returned' THEN 1 END)::FLOAT / COUNT(*) * 100)
                    ELSE 0
                END AS return_rate
            FROM orders
            WHERE created_at >= DATE_TRUNC('month', CURRENT_DATE)
        """)
        return float(value or 0)

    async def get_customer_satisfaction(self) -> float:
        value = await self._scalar("""
            SELECT COALESCE(AVG(rating), 0) AS avg_rating
            FROM reviews
            WHERE created_at >= DATE_TRUNC('month', CURRENT_DATE)
        """)
        return float(value or 0)

    # ============================================
    # SERIES
    # ============================================

    async def get_revenue_trend(self) -> List[Dict[str, Any]]:
        """Completed-order revenue per month of the current year"""
        rows = await self._rows(f"""
            SELECT
                TO_CHAR(created_at, 'Mon') AS month,
                EXTRACT(MONTH FROM created_at) AS month_num,
                SUM(total_amount) AS revenue,
                COUNT(*) AS orders
            FROM orders
            WHERE created_at >= DATE_TRUNC('year', CURRENT_DATE)
              AND status IN {COMPLETED_STATUSES}
            GROUP BY TO_CHAR(created_at, 'Mon'), EXTRACT(MONTH FROM created_at)
            ORDER BY EXTRACT(MONTH FROM created_at)
        """)
        return [
            {"month": r["month"], "revenue": float(r["revenue"] or 0), "orders": int(r["orders"] or 0)}
            for r in rows
        ]

    async def get_sales_by_category(self) -> List[Dict[str, Any]]:
        rows = await self._rows(f"""
            SELECT
                c.name AS category,
                SUM(oi.total_price) AS sales,
                COUNT(DISTINCT o.id) AS orders
            FROM categories c
            LEFT JOIN products p ON c.id = p.category_id
            LEFT JOIN order_items oi ON p.id = oi.product_id
            LEFT JOIN orders o ON oi.order_id = o.id
            WHERE o.status IN {COMPLETED_STATUSES}
            GROUP BY c.id, c.name
            ORDER BY sales DESC
        """)
        return [
            {"category": r["category"], "sales": float(r["sales"] or 0), "orders": int(r["orders"] or 0)}
            for r in rows
        ]

    async def get_top_products(self, limit: int = 5) -> List[Dict[str, Any]]:
        """Best sellers by revenue; growth is relative to the next-ranked product"""
        rows = await self._rows(f"""
            SELECT
                p.name,
                SUM(oi.total_price) AS revenue,
                SUM(oi.quantity) AS sales,
                ROUND(
                    (SUM(oi.total_price) - LAG(SUM(oi.total_price)) OVER (ORDER BY SUM(oi.total_price) DESC)) /
                    NULLIF(LAG(SUM(oi.total_price)) OVER (ORDER BY SUM(oi.total_price) DESC), 0) * 100, 2
                ) AS growth
            FROM products p
            JOIN order_items oi ON p.id = oi.product_id
            JOIN orders o ON oi.order_id = o.id
            WHERE o.status IN {COMPLETED_STATUSES}
            GROUP BY p.id, p.name
            ORDER BY revenue DESC
            LIMIT :limit
        """, {"limit": limit})
        return [
            {
                "name": r["name"],
                "revenue": float(r["revenue"] or 0),
                "sales": int(r["sales"] or 0),
                "growth": float(r["growth"] or 0),
            }
            for r in rows
        ]

    async def get_recent_orders(self, limit: int = 5) -> List[Dict[str, Any]]:
        rows = await self._rows("""
            SELECT
                o.id,
                CONCAT(c.first_name, ' ', c.last_name) AS customer,
                o.total_amount AS amount,
                o.status,
                o.created_at
            FROM orders o
            JOIN customers c ON o.customer_id = c.id
            ORDER BY o.created_at DESC
            LIMIT :limit
        """, {"limit": limit})
        return [
            {
                "id": r["id"],
                "customer": r["customer"],
                "amount": f"{float(r['amount'] or 0):.2f}",
                "status": _title_first(r["status"] or ""),
            }
            for r in rows
        ]


def _title_first(value: str) -> str:
    return value[:1].upper() + value[1:]
