"""
SQL Executor
Runs already-validated SELECT statements under row and time bounds
"""
import re
import math
import time
import asyncio
import logging
from typing import Dict, Any, List, Optional, Tuple

import sqlparse
from sqlalchemy import text as sqltext
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import ExecutionConfig
from app.core.errors import ErrorKind, db_error_code, db_error_message
from app.dtos import ExecutionOptions, ExecutionResult, ExecutionMetadata, ColumnInfo

logger = logging.getLogger(__name__)

# SQLSTATE raised by Postgres when statement_timeout cancels a query
QUERY_CANCELED_SQLSTATE = "57014"

LIMIT_PATTERN = re.compile(r"\blimit\b", re.I)


class StatementTimeout(Exception):
    """Statement exceeded its time budget (client-side or server-side)"""

    def __init__(self, timeout_ms: int):
        super().__init__(f"Query timeout after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class BoundedExecutor:
    """
    Executes SQL against a pooled async engine

    Every call checks out its own connection and releases it on every exit
    path. The statement timeout is set inside the connection's transaction
    (SET LOCAL) so it never leaks into the pool.
    """

    def __init__(self, engine: AsyncEngine, config: ExecutionConfig):
        self.engine = engine
        self.config = config

    async def execute(self, sql: str, options: Optional[ExecutionOptions] = None) -> ExecutionResult:
        """
        Execute a SELECT statement and normalize the result

        Args:
            sql: Statement that already passed SafetyValidator
            options: Per-call maxResults / timeoutMs overrides

        Returns:
            ExecutionResult; driver errors and timeouts come back with
            success=False instead of being raised
        """
        started = time.perf_counter()
        options = options or ExecutionOptions()
        max_rows = options.max_results or self.config.max_result_rows
        timeout_ms = options.timeout_ms or self.config.statement_timeout_ms

        display_sql = self.format_sql(sql)
        executed_sql = self.apply_limit(sql, max_rows)
        metadata = ExecutionMetadata(sandbox_mode=self.config.sandbox_mode)

        try:
            columns, rows = await self.run_statement(executed_sql, timeout_ms)
        except StatementTimeout as e:
            elapsed = _elapsed_ms(started)
            logger.warning(f"Query timed out after {elapsed}ms (budget {timeout_ms}ms)")
            return ExecutionResult(
                success=False,
                error=str(e),
                error_kind=ErrorKind.QUERY_TIMEOUT,
                execution_time_ms=elapsed,
                sql=display_sql,
                executed_sql=executed_sql,
                metadata=metadata,
            )
        except Exception as e:
            elapsed = _elapsed_ms(started)
            message = db_error_message(e)
            logger.warning(f"Query execution failed after {elapsed}ms: {message}")
            return ExecutionResult(
                success=False,
                error=message,
                error_kind=ErrorKind.EXECUTION_ERROR,
                execution_time_ms=elapsed,
                sql=display_sql,
                executed_sql=executed_sql,
                metadata=metadata,
            )

        elapsed = _elapsed_ms(started)
        logger.info(f"Query executed successfully in {elapsed}ms ({len(rows)} rows)")

        return ExecutionResult(
            success=True,
            rows=rows,
            columns=infer_columns(columns, rows),
            row_count=len(rows),
            execution_time_ms=elapsed,
            sql=display_sql,
            executed_sql=executed_sql,
            metadata=metadata,
        )

    async def run_statement(
        self,
        statement: str,
        timeout_ms: Optional[int] = None
    ) -> Tuple[List[str], List[Dict[str, Any]]]:
        """
        Run one statement on a scoped connection under the time budget

        Raises:
            StatementTimeout: budget exceeded (either side noticed first)
            Exception: any other driver error, untouched
        """
        timeout_ms = timeout_ms or self.config.statement_timeout_ms
        try:
            return await asyncio.wait_for(
                self._run_on_connection(statement, timeout_ms),
                timeout=timeout_ms / 1000
            )
        except asyncio.TimeoutError:
            raise StatementTimeout(timeout_ms)
        except Exception as e:
            if db_error_code(e) == QUERY_CANCELED_SQLSTATE:
                raise StatementTimeout(timeout_ms) from e
            raise

    async def _run_on_connection(
        self,
        statement: str,
        timeout_ms: int
    ) -> Tuple[List[str], List[Dict[str, Any]]]:
        async with self.engine.connect() as conn:
            async with conn.begin():
                await conn.execute(sqltext(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))
                rs = await conn.execute(sqltext(statement))
                cols = list(rs.keys())
                rows = [dict(row) for row in rs.mappings().all()]
        return cols, rows

    @staticmethod
    def apply_limit(sql: str, max_rows: int) -> str:
        """
        Append LIMIT when the statement has none

        A LIMIT already present anywhere in the text wins, including one in
        a subquery.
        """
        if LIMIT_PATTERN.search(sql) is not None:
            return sql
        stripped = sql.strip().rstrip(";").rstrip()
        return f"{stripped} LIMIT {int(max_rows)}"

    @staticmethod
    def format_sql(sql: str) -> str:
        """Pretty-print for display; falls back to the original text"""
        try:
            formatted = sqlparse.format(sql, reindent=True, keyword_case="upper")
            return formatted or sql
        except Exception as e:
            logger.warning(f"Failed to format SQL: {e}")
            return sql


def infer_columns(names: List[str], rows: List[Dict[str, Any]]) -> List[ColumnInfo]:
    """
    Column descriptors from the returned values

    The type is the Python type name of the first non-null value ("unknown"
    when every value is null or there are no rows).
    """
    columns: List[ColumnInfo] = []
    for name in names:
        values = [row.get(name) for row in rows]
        sample = next((v for v in values if v is not None), None)
        columns.append(ColumnInfo(
            name=name,
            type=type(sample).__name__ if sample is not None else "unknown",
            nullable=any(v is None for v in values),
        ))
    return columns


def _elapsed_ms(started: float) -> int:
    return max(1, math.ceil((time.perf_counter() - started) * 1000))
