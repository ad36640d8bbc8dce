"""
SQL utilities (catalog, protection, execution, planning)
"""
from app.pipeline.sql.catalog import (
    describe_column,
    context_tables,
    format_schema_context,
    format_relationships
)
from app.pipeline.sql.protector import SafetyValidator
from app.pipeline.sql.executor import BoundedExecutor, StatementTimeout
from app.pipeline.sql.planner import PlanEstimator

__all__ = [
    "describe_column",
    "context_tables",
    "format_schema_context",
    "format_relationships",
    "SafetyValidator",
    "BoundedExecutor",
    "StatementTimeout",
    "PlanEstimator",
]
