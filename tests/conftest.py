from typing import Any, Dict, List

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.core.config import ExecutionConfig, PipelineConfig
from app.main import app


@pytest.fixture
def execution_config() -> ExecutionConfig:
    return ExecutionConfig(max_result_rows=10000, statement_timeout_ms=30000, sandbox_mode=True)


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    return PipelineConfig(schema_top_k=15, deadline_ms=None, default_max_results=1000)


@pytest.fixture
def customer_rows() -> List[Dict[str, Any]]:
    return [
        {"id": 1, "name": "Ada"},
        {"id": 2, "name": "Grace"},
        {"id": 3, "name": None},
    ]


# Client (dependencies are overridden per test)
@pytest_asyncio.fixture(scope="function")
async def client():
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
