"""
Dashboard Controller - analytics endpoints
Fixed parameterized queries; never goes through the NLQ pipeline
"""
import logging
from typing import Any, Awaitable, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.dtos import utcnow
from app.dependencies.services import get_dashboard_service
from app.services import DashboardService, clamp_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


async def _envelope(fetch: Awaitable[Any], error_message: str) -> JSONResponse:
    """{success, data, timestamp} on success, 500 {success:false, error} otherwise"""
    try:
        data = await fetch
    except Exception as e:
        logger.error(f"{error_message}: {e}", exc_info=e)
        return JSONResponse(status_code=500, content={"success": False, "error": error_message})
    return JSONResponse(content={
        "success": True,
        "data": data,
        "timestamp": utcnow().isoformat(),
    })


@router.get("/metrics")
async def get_metrics(service: DashboardService = Depends(get_dashboard_service)):
    return await _envelope(service.get_metrics(), "Failed to fetch dashboard metrics")


@router.get("/revenue-trend")
async def get_revenue_trend(service: DashboardService = Depends(get_dashboard_service)):
    return await _envelope(service.get_revenue_trend(), "Failed to fetch revenue trend data")


@router.get("/sales-by-category")
async def get_sales_by_category(service: DashboardService = Depends(get_dashboard_service)):
    return await _envelope(service.get_sales_by_category(), "Failed to fetch sales by category data")


@router.get("/top-products")
async def get_top_products(
    limit: Optional[str] = Query(None),
    service: DashboardService = Depends(get_dashboard_service)
):
    return await _envelope(service.get_top_products(clamp_limit(limit)), "Failed to fetch top products data")


@router.get("/recent-orders")
async def get_recent_orders(
    limit: Optional[str] = Query(None),
    service: DashboardService = Depends(get_dashboard_service)
):
    return await _envelope(service.get_recent_orders(clamp_limit(limit)), "Failed to fetch recent orders data")


@router.get("/all")
async def get_all(service: DashboardService = Depends(get_dashboard_service)):
    return await _envelope(service.get_all_dashboard_data(), "Failed to fetch dashboard data")
