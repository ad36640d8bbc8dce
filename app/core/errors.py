"""
Error taxonomy and HTTP exception handlers

Expected domain failures (rejected SQL, timeouts, driver errors) travel as
data with an ErrorKind. The exceptions below are reserved for operations that
"fail with" a kind, and for provider outages.
"""
import logging
from enum import Enum
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    EMPTY_QUERY = "EmptyQuery"
    NOT_A_SELECT = "NotASelect"
    DANGEROUS_OPERATION = "DangerousOperation"
    SYSTEM_TABLE_ACCESS = "SystemTableAccess"
    FILE_SYSTEM_ACCESS = "FileSystemAccess"
    DANGEROUS_FUNCTION = "DangerousFunction"
    DANGEROUS_SUBQUERY = "DangerousSubquery"
    PLANNING_FAILED = "PlanningFailed"
    SYNTAX_INVALID = "SyntaxInvalid"
    QUERY_TIMEOUT = "QueryTimeout"
    EXECUTION_ERROR = "ExecutionError"
    GENERATION_FAILED = "GenerationFailed"
    PIPELINE_TIMEOUT = "PipelineTimeout"


SAFETY_ERROR_KINDS = frozenset({
    ErrorKind.EMPTY_QUERY,
    ErrorKind.NOT_A_SELECT,
    ErrorKind.DANGEROUS_OPERATION,
    ErrorKind.SYSTEM_TABLE_ACCESS,
    ErrorKind.FILE_SYSTEM_ACCESS,
    ErrorKind.DANGEROUS_FUNCTION,
    ErrorKind.DANGEROUS_SUBQUERY,
})

# Kinds answered with HTTP 400; everything else is reported inside a 200 body
CLIENT_ERROR_KINDS = SAFETY_ERROR_KINDS | {
    ErrorKind.PLANNING_FAILED,
    ErrorKind.SYNTAX_INVALID,
    ErrorKind.GENERATION_FAILED,
}


class NLQError(Exception):
    """Domain failure that carries an ErrorKind"""

    def __init__(self, kind: ErrorKind, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code


class PlanningFailedError(NLQError):
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(ErrorKind.PLANNING_FAILED, message, code)


class SQLGenerationError(NLQError):
    def __init__(self, message: str):
        super().__init__(ErrorKind.GENERATION_FAILED, message)


class LLMProviderError(Exception):
    """LLM/embedding provider unreachable or misbehaving (not a domain outcome)"""


def db_error_message(exc: Exception) -> str:
    """Driver message without SQLAlchemy's statement/background decoration"""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def db_error_code(exc: Exception) -> Optional[str]:
    """SQLSTATE of a driver error, when the driver exposes one"""
    for source in (getattr(exc, "orig", None), exc):
        if source is None:
            continue
        code = getattr(source, "sqlstate", None) or getattr(source, "pgcode", None)
        if code:
            return str(code)
    return None


def register_exception_handlers(app: FastAPI) -> None:
    """Install JSON error envelopes on the app"""

    @app.exception_handler(NLQError)
    async def nlq_error_handler(request: Request, exc: NLQError):
        logger.info(f"{request.method} {request.url.path} rejected: {exc.kind.value}: {exc.message}")
        content = {"success": False, "error": exc.message, "errorKind": exc.kind.value}
        if exc.code:
            content["code"] = exc.code
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        logger.warning(f"Validation error on {request.url.path}: {details}")
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Validation failed", "details": details},
        )

    @app.exception_handler(LLMProviderError)
    async def provider_error_handler(request: Request, exc: LLMProviderError):
        logger.error(f"LLM provider failure on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error"},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error"},
        )
