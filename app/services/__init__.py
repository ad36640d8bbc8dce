"""
Service layer for business logic
"""
from app.services.query_execution_service import QueryExecutionService
from app.services.schema_context_service import SchemaContextFinder
from app.services.nlq_service import NLQService
from app.services.dashboard_service import DashboardService, clamp_limit

__all__ = [
    "QueryExecutionService",
    "SchemaContextFinder",
    "NLQService",
    "DashboardService",
    "clamp_limit",
]
