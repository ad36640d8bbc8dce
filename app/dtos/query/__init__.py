"""
Query DTOs
"""
from app.dtos.query.safety import SafetyVerdict
from app.dtos.query.execution import (
    utcnow,
    ExecutionOptions,
    ColumnInfo,
    ExecutionMetadata,
    ExecutionResult,
    CostEstimate,
    ExecutionPlan,
    SyntaxCheck,
    ConnectionStatus,
)
from app.dtos.query.context import (
    PipelineStage,
    SchemaContextItem,
    GeneratedSQL,
    ResponseMetadata,
    NLQResponse,
    QueryOptions,
)

__all__ = [
    "utcnow",
    "SafetyVerdict",
    "ExecutionOptions",
    "ColumnInfo",
    "ExecutionMetadata",
    "ExecutionResult",
    "CostEstimate",
    "ExecutionPlan",
    "SyntaxCheck",
    "ConnectionStatus",
    "PipelineStage",
    "SchemaContextItem",
    "GeneratedSQL",
    "ResponseMetadata",
    "NLQResponse",
    "QueryOptions",
]
