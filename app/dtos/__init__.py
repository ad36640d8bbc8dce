"""
DTOs (Data Transfer Objects)
Internal objects for passing data between layers
"""
from app.dtos.base import WireModel
from app.dtos.query import (
    utcnow,
    SafetyVerdict,
    ExecutionOptions,
    ColumnInfo,
    ExecutionMetadata,
    ExecutionResult,
    CostEstimate,
    ExecutionPlan,
    SyntaxCheck,
    ConnectionStatus,
    PipelineStage,
    SchemaContextItem,
    GeneratedSQL,
    ResponseMetadata,
    NLQResponse,
    QueryOptions,
)

__all__ = [
    "utcnow",
    "WireModel",
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
