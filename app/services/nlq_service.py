"""
Service for natural-language query orchestration
Embedding → schema context → SQL generation → safety → syntax → execution
"""
import time
import math
import asyncio
import logging
from typing import Optional, Dict, Any, List

from app.core.config import PipelineConfig
from app.core.database import check_connections
from app.core.errors import ErrorKind, PlanningFailedError, SQLGenerationError
from app.dtos import (
    ExecutionOptions,
    ExecutionResult,
    NLQResponse,
    PipelineStage,
    QueryOptions,
    ResponseMetadata,
    SchemaContextItem,
    GeneratedSQL,
    CostEstimate,
)
from app.models import TableRelationship
from app.pipeline.llm import LLMClient
from app.pipeline.sql import context_tables
from app.services.query_execution_service import QueryExecutionService
from app.services.schema_context_service import SchemaContextFinder

logger = logging.getLogger(__name__)

QUERY_SUGGESTIONS = [
    "Show me the top 10 customers by total order value",
    "What is the total revenue for last month?",
    "Which product category has the highest sales?",
    "Show me customers who haven't ordered in 30 days",
    "What is the average order value by month?",
    "Show me the revenue trend over the last 6 months",
    "Which products are most popular this quarter?",
    "Show me orders that are still pending",
    "What is the return rate by product category?",
    "Show me the monthly order count summary",
]

MAX_SUGGESTIONS = 5


class _PipelineProgress:
    """Last stage reached, readable after a deadline cancels the pipeline"""

    def __init__(self):
        self.stage = PipelineStage.RECEIVED
        self.generated: Optional[GeneratedSQL] = None
        self.schema_context: List[SchemaContextItem] = []


class NLQService:
    """
    Orchestrates one natural-language question through the pipeline

    Steps run strictly in sequence. Expected failures (rejected SQL, syntax
    errors, timeouts, driver errors) come back as an NLQResponse with
    success=False and an error kind; provider outages propagate.
    """

    def __init__(
        self,
        llm: LLMClient,
        schema_finder: SchemaContextFinder,
        execution: QueryExecutionService,
        config: PipelineConfig
    ):
        self.llm = llm
        self.schema_finder = schema_finder
        self.execution = execution
        self.config = config

    # ============================================
    # FULL PIPELINE
    # ============================================

    async def process_query(
        self,
        query: str,
        language: str = "en",
        options: Optional[QueryOptions] = None
    ) -> NLQResponse:
        """
        Run the full pipeline for one question

        Args:
            query: Natural-language question
            language: "en" or "hi"
            options: includeExplanation / validateBeforeExecution / maxResults

        Returns:
            NLQResponse whose metadata.stage is the terminal stage reached
        """
        started = time.perf_counter()
        options = options or QueryOptions()
        progress = _PipelineProgress()
        logger.info(f"Processing NLQ: {query!r} ({language})")

        pipeline = self._run_pipeline(query, language, options, progress, started)
        if not self.config.deadline_ms:
            return await pipeline

        try:
            return await asyncio.wait_for(pipeline, timeout=self.config.deadline_ms / 1000)
        except asyncio.TimeoutError:
            logger.warning(f"Pipeline deadline of {self.config.deadline_ms}ms exceeded at {progress.stage.value}")
            return self._failure(
                query, language, started, progress.stage,
                f"Pipeline timeout after {self.config.deadline_ms}ms",
                ErrorKind.PIPELINE_TIMEOUT,
                generated=progress.generated,
                schema_context=progress.schema_context,
            )

    async def _run_pipeline(
        self,
        query: str,
        language: str,
        options: QueryOptions,
        progress: _PipelineProgress,
        started: float
    ) -> NLQResponse:
        progress.stage = PipelineStage.GENERATING
        try:
            schema_context, generated = await self._generate(query, language, progress)
        except SQLGenerationError as e:
            logger.warning(f"SQL generation failed: {e.message}")
            return self._failure(
                query, language, started, PipelineStage.GENERATING, e.message, e.kind,
                schema_context=progress.schema_context,
            )

        progress.stage = PipelineStage.VALIDATING
        verdict = self.execution.validate(generated.sql)
        if verdict.rejected:
            return self._failure(
                query, language, started, PipelineStage.REJECTED, verdict.reason, verdict.kind,
                generated=generated, schema_context=schema_context,
            )
        progress.stage = PipelineStage.VALIDATED

        if options.validate_before_execution:
            progress.stage = PipelineStage.SYNTAX_CHECK
            check = await self.execution.validate_syntax(generated.sql)
            if not check.valid:
                return self._failure(
                    query, language, started, PipelineStage.SYNTAX_INVALID,
                    "Generated SQL has syntax errors", ErrorKind.SYNTAX_INVALID,
                    generated=generated, schema_context=schema_context,
                    details=check.to_json(),
                )
            progress.stage = PipelineStage.SYNTAX_OK

        cost_estimation = await self._estimate_cost(generated.sql)

        progress.stage = PipelineStage.EXECUTING
        result = await self.execution.execute_validated(
            generated.sql,
            ExecutionOptions(max_results=options.max_results or self.config.default_max_results)
        )
        stage = _terminal_stage(result)
        progress.stage = stage

        return NLQResponse(
            success=result.success,
            query=query,
            language=language,
            sql=generated.sql,
            confidence=generated.confidence,
            explanation=generated.explanation if options.include_explanation else None,
            schema_context=schema_context,
            cost_estimation=cost_estimation,
            execution_result=result,
            error=result.error,
            error_kind=result.error_kind,
            metadata=self._metadata(started, stage, generated.model),
        )

    async def _generate(self, query: str, language: str, progress: _PipelineProgress):
        schema_context = await self.schema_finder.find_relevant_schema(query, self.config.schema_top_k)
        progress.schema_context = schema_context

        relationships = await self._relationships_for(schema_context)
        generated = await self.llm.generate_sql(query, schema_context, relationships, language)
        progress.generated = generated
        logger.info(f"Generated SQL (confidence {generated.confidence:.2f}): {generated.sql}")
        return schema_context, generated

    async def _relationships_for(self, schema_context: List[SchemaContextItem]) -> List[TableRelationship]:
        tables = context_tables(schema_context)
        if not tables:
            return []
        return await self.schema_finder.get_relationships(tables)

    async def _estimate_cost(self, sql: str) -> Optional[CostEstimate]:
        try:
            return await self.execution.estimate_cost(sql)
        except PlanningFailedError as e:
            logger.warning(f"Continuing without cost estimate: {e.message}")
            return None

    # ============================================
    # PARTIAL FLOWS
    # ============================================

    async def generate_sql_only(self, query: str, language: str = "en") -> NLQResponse:
        """Generate SQL without validating or executing it"""
        started = time.perf_counter()
        progress = _PipelineProgress()
        try:
            schema_context, generated = await self._generate(query, language, progress)
        except SQLGenerationError as e:
            logger.warning(f"SQL generation failed: {e.message}")
            return self._failure(
                query, language, started, PipelineStage.GENERATING, e.message, e.kind,
                schema_context=progress.schema_context,
            )

        return NLQResponse(
            success=True,
            query=query,
            language=language,
            sql=generated.sql,
            confidence=generated.confidence,
            explanation=generated.explanation,
            schema_context=schema_context,
            metadata=self._metadata(started, PipelineStage.GENERATED, generated.model),
        )

    async def execute_sql(self, sql: str, max_results: Optional[int] = None) -> ExecutionResult:
        """Validator + executor on caller-supplied SQL (no LLM step)"""
        return await self.execution.execute(
            sql,
            ExecutionOptions(max_results=max_results or self.config.default_max_results)
        )

    def get_query_suggestions(self, partial_query: str = "") -> List[str]:
        needle = (partial_query or "").lower()
        matches = [s for s in QUERY_SUGGESTIONS if needle in s.lower()]
        return matches[:MAX_SUGGESTIONS]

    async def get_schema_info(self) -> Dict[str, Any]:
        return await self.schema_finder.get_schema_info()

    async def add_table_relationship(self, data: Dict[str, Any]) -> TableRelationship:
        return await self.schema_finder.add_relationship(data)

    async def refresh_schema_metadata(self) -> int:
        return await self.schema_finder.refresh_schema_metadata()

    async def get_health_status(self) -> Dict[str, Any]:
        """Both databases and the LLM provider must be reachable"""
        connections = await check_connections()
        database = await self.execution.get_connection_status()
        llm_ok = await self.llm.ping()

        healthy = bool(connections["primary"] and connections["vector"] and database.connected and llm_ok)
        return {
            "healthy": healthy,
            "database": database.to_json(),
            "vectorStore": {"connected": connections["vector"]},
            "llm": {"reachable": llm_ok, "model": self.llm.model_name},
            "errors": connections["errors"],
        }

    # ============================================
    # HELPERS
    # ============================================

    def _metadata(self, started: float, stage: PipelineStage, model: Optional[str] = None) -> ResponseMetadata:
        return ResponseMetadata(
            processing_time_ms=math.ceil((time.perf_counter() - started) * 1000),
            model=model,
            sandbox_mode=self.execution.config.sandbox_mode,
            stage=stage,
        )

    def _failure(
        self,
        query: str,
        language: str,
        started: float,
        stage: PipelineStage,
        error: str,
        kind: ErrorKind,
        generated: Optional[GeneratedSQL] = None,
        schema_context: Optional[List[SchemaContextItem]] = None,
        details: Any = None
    ) -> NLQResponse:
        return NLQResponse(
            success=False,
            query=query,
            language=language,
            sql=generated.sql if generated else None,
            confidence=generated.confidence if generated else None,
            schema_context=schema_context or [],
            error=error,
            error_kind=kind,
            details=details,
            metadata=self._metadata(started, stage, generated.model if generated else None),
        )


def _terminal_stage(result: ExecutionResult) -> PipelineStage:
    if result.success:
        return PipelineStage.COMPLETED
    if result.error_kind == ErrorKind.QUERY_TIMEOUT:
        return PipelineStage.TIMEOUT
    return PipelineStage.EXECUTION_ERROR
