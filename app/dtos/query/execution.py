"""
Execution DTOs (results, plans, cost estimates)
"""
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from pydantic import Field
from app.core.errors import ErrorKind
from app.dtos.base import WireModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExecutionOptions(WireModel):
    """Per-call bounds; unset fields fall back to ExecutionConfig"""
    max_results: Optional[int] = Field(default=None, gt=0)
    timeout_ms: Optional[int] = Field(default=None, gt=0)


class ColumnInfo(WireModel):
    name: str
    type: str
    nullable: bool


class ExecutionMetadata(WireModel):
    executed_at: datetime = Field(default_factory=utcnow)
    sandbox_mode: bool = False


class ExecutionResult(WireModel):
    """
    Result of one execution attempt

    Failures (timeout, driver error, rejected statement) are reported here
    with success=False instead of being raised.
    """
    success: bool
    rows: List[Dict[str, Any]] = []
    columns: List[ColumnInfo] = []
    row_count: int = 0
    execution_time_ms: int = 0
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    sql: Optional[str] = None            # formatted, for display
    executed_sql: Optional[str] = None   # statement actually sent (LIMIT applied)
    metadata: ExecutionMetadata = Field(default_factory=ExecutionMetadata)


class CostEstimate(WireModel):
    total_cost: float
    estimated_rows: int
    cost_per_row: float
    estimated_at: datetime = Field(default_factory=utcnow)


class ExecutionPlan(WireModel):
    plan: Any
    generated_at: datetime = Field(default_factory=utcnow)


class SyntaxCheck(WireModel):
    valid: bool
    message: str
    error_code: Optional[str] = None


class ConnectionStatus(WireModel):
    connected: bool
    current_time: Optional[datetime] = None
    version: Optional[str] = None
    error: Optional[str] = None
