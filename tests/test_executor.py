import pytest

from app.core.config import ExecutionConfig
from app.core.errors import ErrorKind
from app.dtos import ExecutionOptions
from app.pipeline.sql import BoundedExecutor

from doubles import FakeEngine, FakeResult, DriverError, hang


def make_executor(responder=None, **config):
    engine = FakeEngine(responder)
    defaults = {"max_result_rows": 10000, "statement_timeout_ms": 30000}
    defaults.update(config)
    return BoundedExecutor(engine, ExecutionConfig(**defaults)), engine


@pytest.mark.asyncio
async def test_injects_default_limit(customer_rows):
    executor, engine = make_executor(lambda sql, params: FakeResult(customer_rows))

    result = await executor.execute("SELECT * FROM customers")

    assert result.success
    assert engine.queries == ["SELECT * FROM customers LIMIT 10000"]
    assert result.executed_sql == "SELECT * FROM customers LIMIT 10000"


@pytest.mark.asyncio
async def test_caller_limit_wins():
    executor, engine = make_executor()

    await executor.execute("SELECT * FROM customers LIMIT 5")

    assert engine.queries == ["SELECT * FROM customers LIMIT 5"]


@pytest.mark.asyncio
async def test_max_results_option():
    executor, engine = make_executor()

    await executor.execute("SELECT * FROM customers;", ExecutionOptions(max_results=50))

    assert engine.queries == ["SELECT * FROM customers LIMIT 50"]


def test_apply_limit_is_case_insensitive_and_word_bounded():
    assert BoundedExecutor.apply_limit("select * from t limit 3", 10) == "select * from t limit 3"
    assert BoundedExecutor.apply_limit("SELECT * FROM t;  ", 10) == "SELECT * FROM t LIMIT 10"
    # "unlimited" is not the LIMIT token
    assert BoundedExecutor.apply_limit("SELECT unlimited FROM plans", 7) == "SELECT unlimited FROM plans LIMIT 7"


@pytest.mark.asyncio
async def test_sets_statement_timeout_per_transaction():
    executor, engine = make_executor()

    await executor.execute("SELECT 1", ExecutionOptions(timeout_ms=1234))

    assert engine.settings == ["SET LOCAL statement_timeout = 1234"]


@pytest.mark.asyncio
async def test_success_shape(customer_rows):
    executor, _ = make_executor(lambda sql, params: FakeResult(customer_rows))

    result = await executor.execute("SELECT id, name FROM customers")

    assert result.rows == customer_rows
    assert result.row_count == 3
    assert [c.name for c in result.columns] == ["id", "name"]
    assert result.columns[0].type == "int"
    assert result.columns[0].nullable is False
    assert result.columns[1].nullable is True
    assert result.execution_time_ms > 0
    assert result.error is None


@pytest.mark.asyncio
async def test_empty_result_keeps_column_names():
    executor, _ = make_executor(lambda sql, params: FakeResult([], columns=["id", "name"]))

    result = await executor.execute("SELECT id, name FROM customers WHERE false")

    assert result.success
    assert result.row_count == 0
    assert [(c.name, c.type) for c in result.columns] == [("id", "unknown"), ("name", "unknown")]


@pytest.mark.asyncio
async def test_driver_error_is_returned_as_data():
    executor, engine = make_executor(lambda sql, params: Exception("Table does not exist"))

    result = await executor.execute("SELECT * FROM missing")

    assert result.success is False
    assert result.error == "Table does not exist"
    assert result.error_kind == ErrorKind.EXECUTION_ERROR
    assert engine.checkouts == engine.releases == 1


@pytest.mark.asyncio
async def test_client_side_timeout():
    executor, engine = make_executor(lambda sql, params: hang(5.0))

    result = await executor.execute("SELECT pg_sleep_for_a_while()", ExecutionOptions(timeout_ms=50))

    assert result.success is False
    assert result.error_kind == ErrorKind.QUERY_TIMEOUT
    assert result.error == "Query timeout after 50ms"
    assert 45 <= result.execution_time_ms < 2000
    assert engine.checkouts == engine.releases == 1


@pytest.mark.asyncio
async def test_server_side_cancel_is_a_timeout():
    executor, _ = make_executor(
        lambda sql, params: DriverError("canceling statement due to statement timeout", sqlstate="57014")
    )

    result = await executor.execute("SELECT * FROM orders", ExecutionOptions(timeout_ms=100))

    assert result.error_kind == ErrorKind.QUERY_TIMEOUT
    assert result.error == "Query timeout after 100ms"


@pytest.mark.asyncio
async def test_connection_released_on_success():
    executor, engine = make_executor()

    await executor.execute("SELECT 1")
    await executor.execute("SELECT 2")

    assert engine.checkouts == engine.releases == 2


@pytest.mark.asyncio
async def test_formatting_is_display_only():
    executor, engine = make_executor()

    result = await executor.execute("select id from customers")

    assert engine.queries == ["select id from customers LIMIT 10000"]
    assert result.sql.startswith("SELECT id")


def test_format_failure_falls_back(monkeypatch):
    import app.pipeline.sql.executor as executor_module

    def boom(*args, **kwargs):
        raise ValueError("cannot format")

    monkeypatch.setattr(executor_module.sqlparse, "format", boom)

    assert BoundedExecutor.format_sql("select  *  from t") == "select  *  from t"


@pytest.mark.asyncio
async def test_sandbox_flag_in_metadata():
    executor, _ = make_executor(sandbox_mode=True)

    result = await executor.execute("SELECT 1")

    assert result.metadata.sandbox_mode is True
