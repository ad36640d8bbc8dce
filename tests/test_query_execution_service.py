import pytest

from app.core.errors import ErrorKind
from app.dtos import ExecutionOptions
from app.services import QueryExecutionService

from doubles import FakeEngine, FakeResult, pipeline_responder


@pytest.mark.asyncio
async def test_accepted_query_end_to_end(execution_config, customer_rows):
    """SELECT → validator accepts → executor runs with injected LIMIT"""
    engine = FakeEngine(pipeline_responder(customer_rows))
    service = QueryExecutionService(engine, execution_config)

    result = await service.execute("SELECT id, name FROM customers")

    assert result.success
    assert engine.queries == ["SELECT id, name FROM customers LIMIT 10000"]
    assert result.rows == customer_rows
    assert result.row_count == len(customer_rows)
    assert len(result.columns) == 2


@pytest.mark.asyncio
async def test_rejected_query_never_reaches_database(execution_config):
    engine = FakeEngine()
    service = QueryExecutionService(engine, execution_config)

    result = await service.execute("DELETE FROM customers")

    assert result.success is False
    assert result.error_kind == ErrorKind.DANGEROUS_OPERATION
    assert "DELETE" in result.error
    assert engine.checkouts == 0
    assert engine.statements == []


@pytest.mark.asyncio
async def test_options_flow_through(execution_config):
    engine = FakeEngine()
    service = QueryExecutionService(engine, execution_config)

    await service.execute("SELECT * FROM orders", ExecutionOptions(max_results=25, timeout_ms=500))

    assert engine.settings == ["SET LOCAL statement_timeout = 500"]
    assert engine.queries == ["SELECT * FROM orders LIMIT 25"]


@pytest.mark.asyncio
async def test_connection_status(execution_config):
    engine = FakeEngine(lambda sql, params: FakeResult([
        {"current_time": None, "version": "PostgreSQL 16.2"}
    ]))
    service = QueryExecutionService(engine, execution_config)

    status = await service.get_connection_status()

    assert status.connected
    assert status.version == "PostgreSQL 16.2"


@pytest.mark.asyncio
async def test_connection_status_failure(execution_config):
    engine = FakeEngine(lambda sql, params: ConnectionRefusedError("connection refused"))
    service = QueryExecutionService(engine, execution_config)

    status = await service.get_connection_status()

    assert status.connected is False
    assert "connection refused" in status.error
