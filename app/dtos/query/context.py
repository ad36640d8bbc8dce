"""
NL→SQL pipeline DTOs
"""
from enum import Enum
from typing import Optional, List, Any
from datetime import datetime
from pydantic import Field
from app.core.errors import ErrorKind
from app.dtos.base import WireModel
from app.dtos.query.execution import ExecutionResult, CostEstimate, utcnow


class PipelineStage(str, Enum):
    """
    Stages of one query through the pipeline

    Received -> Validating -> Rejected | Validated -> SyntaxCheck
    -> SyntaxInvalid | SyntaxOk -> Executing -> Timeout | ExecutionError | Completed
    """
    RECEIVED = "Received"
    GENERATING = "Generating"
    GENERATED = "Generated"
    VALIDATING = "Validating"
    REJECTED = "Rejected"
    VALIDATED = "Validated"
    SYNTAX_CHECK = "PlanningOrSyntaxCheck"
    SYNTAX_INVALID = "SyntaxInvalid"
    SYNTAX_OK = "SyntaxOk"
    EXECUTING = "Executing"
    TIMEOUT = "Timeout"
    EXECUTION_ERROR = "ExecutionError"
    COMPLETED = "Completed"


class SchemaContextItem(WireModel):
    """Schema element ranked by cosine similarity to the question"""
    table: str
    column: Optional[str] = None
    data_type: Optional[str] = None
    description: Optional[str] = None
    similarity_score: float = 0.0


class GeneratedSQL(WireModel):
    sql: str
    confidence: float
    explanation: str = ""
    model: str = ""
    generated_at: datetime = Field(default_factory=utcnow)


class ResponseMetadata(WireModel):
    processed_at: datetime = Field(default_factory=utcnow)
    processing_time_ms: int = 0
    model: Optional[str] = None
    sandbox_mode: bool = False
    stage: PipelineStage = PipelineStage.RECEIVED


class NLQResponse(WireModel):
    """Envelope returned by /query and /generate-sql"""
    success: bool
    query: str
    language: str = "en"
    sql: Optional[str] = None
    confidence: Optional[float] = None
    explanation: Optional[str] = None
    schema_context: List[SchemaContextItem] = []
    cost_estimation: Optional[CostEstimate] = None
    execution_result: Optional[ExecutionResult] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    details: Optional[Any] = None
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class QueryOptions(WireModel):
    """Per-request pipeline switches (camelCase on the wire)"""
    include_explanation: bool = True
    validate_before_execution: bool = True
    max_results: Optional[int] = Field(default=None, ge=1, le=10000)
