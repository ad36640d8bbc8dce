"""
NLQ Controller - natural language to SQL endpoints
"""
import time
import logging
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import CLIENT_ERROR_KINDS
from app.dtos import NLQResponse, utcnow
from app.dependencies.services import get_nlq_service
from app.schemas import NLQQueryRequest, SQLExecutionRequest, RelationshipCreate
from app.services import NLQService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/nlq", tags=["NLQ"])

STARTED_AT = time.monotonic()


def _nlq_json(response: NLQResponse) -> JSONResponse:
    """
    Map a pipeline outcome to HTTP

    Rejections, syntax errors and generation failures are 400; execution
    failures (timeout, driver error) still complete with 200 and success=false.
    """
    status_code = 200
    if not response.success and response.error_kind in CLIENT_ERROR_KINDS:
        status_code = 400
    return JSONResponse(status_code=status_code, content=response.to_json())


@router.post("/query")
async def process_query(
    body: NLQQueryRequest,
    service: NLQService = Depends(get_nlq_service)
):
    """Full pipeline: schema context → SQL → safety → syntax → execution"""
    response = await service.process_query(body.query, body.language, body.options)
    return _nlq_json(response)


@router.post("/generate-sql")
async def generate_sql(
    body: NLQQueryRequest,
    service: NLQService = Depends(get_nlq_service)
):
    """Generate SQL only; nothing is validated or executed"""
    response = await service.generate_sql_only(body.query, body.language)
    return _nlq_json(response)


@router.post("/execute-sql")
async def execute_sql(
    body: SQLExecutionRequest,
    service: NLQService = Depends(get_nlq_service)
):
    """Run caller-supplied SQL through the validator and the bounded executor"""
    result = await service.execute_sql(body.sql, body.options.max_results)
    status_code = 200
    if not result.success and result.error_kind in CLIENT_ERROR_KINDS:
        status_code = 400
    return JSONResponse(status_code=status_code, content=result.to_json())


@router.get("/suggestions")
async def get_suggestions(
    q: str = Query("", max_length=100, description="Partial question"),
    service: NLQService = Depends(get_nlq_service)
):
    return {
        "success": True,
        "suggestions": service.get_query_suggestions(q),
        "metadata": {"generatedAt": utcnow().isoformat()},
    }


@router.get("/schema")
async def get_schema(service: NLQService = Depends(get_nlq_service)):
    info = await service.get_schema_info()
    return {
        "success": True,
        "schema": info["schema"],
        "metadata": {"generatedAt": utcnow().isoformat(), "tableCount": info["tableCount"]},
    }


@router.post("/relationships", status_code=201)
async def add_relationship(
    body: RelationshipCreate,
    service: NLQService = Depends(get_nlq_service)
):
    rel = await service.add_table_relationship(body.model_dump(mode="json"))
    return {
        "success": True,
        "message": "Table relationship added successfully",
        "relationship": rel.model_dump(mode="json"),
    }


@router.post("/refresh-schema")
async def refresh_schema(service: NLQService = Depends(get_nlq_service)):
    """Re-extract the catalog and re-embed every column"""
    count = await service.refresh_schema_metadata()
    return {
        "success": True,
        "message": "Schema metadata refreshed successfully",
        "entries": count,
        "metadata": {"refreshedAt": utcnow().isoformat()},
    }


@router.get("/health")
async def health(service: NLQService = Depends(get_nlq_service)):
    status = await service.get_health_status()
    status["checkedAt"] = utcnow().isoformat()
    return JSONResponse(status_code=200 if status["healthy"] else 503, content=status)


@router.get("/stats")
async def stats():
    return {
        "success": True,
        "service": settings.APP_TITLE,
        "version": settings.APP_VERSION,
        "uptimeSeconds": int(time.monotonic() - STARTED_AT),
    }
