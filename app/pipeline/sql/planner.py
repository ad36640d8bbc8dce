"""
Plan introspection (cost estimate, full plan, syntax pre-flight)
"""
import json
import logging
from typing import Any, List, Dict

from app.core.errors import PlanningFailedError, db_error_code, db_error_message
from app.dtos import CostEstimate, ExecutionPlan, SyntaxCheck
from app.pipeline.sql.executor import BoundedExecutor

logger = logging.getLogger(__name__)


class PlanEstimator:
    """Asks the database for its plan through the executor's connection machinery"""

    def __init__(self, executor: BoundedExecutor):
        self.executor = executor

    def _explain(self, options: str, sql: str) -> str:
        bounded = self.executor.apply_limit(sql, self.executor.config.max_result_rows)
        prefix = f"EXPLAIN ({options})" if options else "EXPLAIN"
        return f"{prefix} {bounded}"

    async def estimate_cost(self, sql: str) -> CostEstimate:
        """
        Plan-only cost estimate (no data movement)

        Raises:
            PlanningFailedError: the engine could not plan the statement
        """
        try:
            _, rows = await self.executor.run_statement(self._explain("FORMAT JSON", sql))
            root = _plan_document(rows)[0]["Plan"]
            total_cost = float(root["Total Cost"])
            estimated_rows = int(root["Plan Rows"])
        except Exception as e:
            message = db_error_message(e)
            logger.warning(f"Cost estimation failed: {message}")
            raise PlanningFailedError(f"Cost estimation failed: {message}", db_error_code(e)) from e

        return CostEstimate(
            total_cost=total_cost,
            estimated_rows=estimated_rows,
            cost_per_row=total_cost / max(estimated_rows, 1),
        )

    async def get_execution_plan(self, sql: str) -> ExecutionPlan:
        """
        Full plan with ANALYZE (the statement really runs)

        Raises:
            PlanningFailedError: plan could not be produced
        """
        try:
            _, rows = await self.executor.run_statement(
                self._explain("FORMAT JSON, ANALYZE, BUFFERS", sql)
            )
            plan = _plan_document(rows)
        except Exception as e:
            message = db_error_message(e)
            logger.warning(f"Execution plan generation failed: {message}")
            raise PlanningFailedError(
                f"Execution plan generation failed: {message}", db_error_code(e)
            ) from e

        return ExecutionPlan(plan=plan)

    async def validate_syntax(self, sql: str) -> SyntaxCheck:
        """Plain EXPLAIN as a cheap syntax gate; never raises"""
        try:
            await self.executor.run_statement(self._explain("", sql))
        except Exception as e:
            message = db_error_message(e)
            logger.info(f"Syntax check failed: {message}")
            return SyntaxCheck(valid=False, message=message, error_code=db_error_code(e))

        return SyntaxCheck(valid=True, message="Query syntax is valid")


def _plan_document(rows: List[Dict[str, Any]]) -> Any:
    """First column of the first EXPLAIN row, decoded when the driver hands back text"""
    if not rows:
        raise ValueError("EXPLAIN returned no rows")
    value = next(iter(rows[0].values()))
    if isinstance(value, (str, bytes)):
        value = json.loads(value)
    return value
