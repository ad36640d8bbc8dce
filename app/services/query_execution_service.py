"""
Service for safe query execution
Composes SafetyValidator, BoundedExecutor and PlanEstimator
"""
import logging
from typing import Optional

from sqlalchemy import text as sqltext
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import ExecutionConfig
from app.core.errors import db_error_message
from app.dtos import (
    SafetyVerdict,
    ExecutionOptions,
    ExecutionResult,
    ExecutionMetadata,
    CostEstimate,
    ExecutionPlan,
    SyntaxCheck,
    ConnectionStatus,
)
from app.pipeline.sql import SafetyValidator, BoundedExecutor, PlanEstimator

logger = logging.getLogger(__name__)


class QueryExecutionService:
    """
    Single entry point for running untrusted SELECT statements

    Holds no per-request state; one instance can serve concurrent requests.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        config: ExecutionConfig,
        validator: Optional[SafetyValidator] = None
    ):
        self.config = config
        self.validator = validator or SafetyValidator()
        self.executor = BoundedExecutor(engine, config)
        self.planner = PlanEstimator(self.executor)

    def validate(self, sql: str) -> SafetyVerdict:
        verdict = self.validator.validate(sql)
        if verdict.rejected:
            logger.info(f"SQL rejected ({verdict.kind.value}): {verdict.reason}")
        return verdict

    async def execute(self, sql: str, options: Optional[ExecutionOptions] = None) -> ExecutionResult:
        """
        Validate then execute

        A rejected statement never reaches the executor; the rejection is
        returned as a failed ExecutionResult carrying the rejection kind.
        """
        verdict = self.validate(sql)
        if verdict.rejected:
            return ExecutionResult(
                success=False,
                error=verdict.reason,
                error_kind=verdict.kind,
                sql=sql,
                metadata=ExecutionMetadata(sandbox_mode=self.config.sandbox_mode),
            )
        return await self.executor.execute(sql, options)

    async def execute_validated(
        self,
        sql: str,
        options: Optional[ExecutionOptions] = None
    ) -> ExecutionResult:
        """Execute a statement whose verdict the caller already holds as accepted"""
        return await self.executor.execute(sql, options)

    async def estimate_cost(self, sql: str) -> CostEstimate:
        return await self.planner.estimate_cost(sql)

    async def get_execution_plan(self, sql: str) -> ExecutionPlan:
        return await self.planner.get_execution_plan(sql)

    async def validate_syntax(self, sql: str) -> SyntaxCheck:
        return await self.planner.validate_syntax(sql)

    async def get_connection_status(self) -> ConnectionStatus:
        """Server time and version of the primary database"""
        try:
            async with self.executor.engine.connect() as conn:
                rs = await conn.execute(sqltext("SELECT NOW() AS current_time, version() AS version"))
                row = rs.mappings().first()
            return ConnectionStatus(
                connected=True,
                current_time=row["current_time"] if row else None,
                version=row["version"] if row else None,
            )
        except Exception as e:
            message = db_error_message(e)
            logger.error(f"Database connection check failed: {message}")
            return ConnectionStatus(connected=False, error=message)
