"""
Service providers for FastAPI Depends

Services are stateless wrappers around the shared engines, so building them
per request is cheap. Tests replace these through app.dependency_overrides.
"""
from app.core.config import settings
from app.core.database import get_primary_engine, get_vector_engine
from app.pipeline.llm import LLMClient
from app.repositories import SchemaRepository, DashboardRepository
from app.services import (
    QueryExecutionService,
    SchemaContextFinder,
    NLQService,
    DashboardService,
)


def get_query_execution_service() -> QueryExecutionService:
    return QueryExecutionService(get_primary_engine(), settings.execution_config())


def get_nlq_service() -> NLQService:
    llm = LLMClient()
    schema_finder = SchemaContextFinder(
        llm,
        SchemaRepository(get_primary_engine(), get_vector_engine()),
        get_vector_engine()
    )
    return NLQService(
        llm=llm,
        schema_finder=schema_finder,
        execution=get_query_execution_service(),
        config=settings.pipeline_config()
    )


def get_dashboard_service() -> DashboardService:
    return DashboardService(DashboardRepository(get_primary_engine()))
