"""
Repository layer for data access
"""
from app.repositories.schema_repository import SchemaRepository, embedding_literal
from app.repositories.dashboard_repository import DashboardRepository

__all__ = [
    "SchemaRepository",
    "DashboardRepository",
    "embedding_literal",
]
