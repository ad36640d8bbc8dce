from .nlq_schema import (
    NLQQueryRequest,
    SQLExecutionRequest,
    ExecuteSQLOptions,
    RelationshipCreate,
    RelationshipType,
)

__all__ = [
    "NLQQueryRequest",
    "SQLExecutionRequest",
    "ExecuteSQLOptions",
    "RelationshipCreate",
    "RelationshipType",
]
