"""
Schemas for NLQ endpoints
"""
from enum import Enum
from typing import Optional, Literal
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.dtos import QueryOptions


class NLQQueryRequest(BaseModel):
    """Request body for POST /query and POST /generate-sql"""
    query: str = Field(..., min_length=1, max_length=1000, description="Natural-language question")
    language: Literal["en", "hi"] = "en"
    options: QueryOptions = Field(default_factory=QueryOptions)


class ExecuteSQLOptions(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    max_results: Optional[int] = Field(default=None, ge=1, le=10000)


class SQLExecutionRequest(BaseModel):
    """Request body for POST /execute-sql"""
    sql: str = Field(..., min_length=1, max_length=10000)
    options: ExecuteSQLOptions = Field(default_factory=ExecuteSQLOptions)


class RelationshipType(str, Enum):
    FOREIGN_KEY = "foreign_key"
    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_MANY = "many_to_many"


class RelationshipCreate(BaseModel):
    """Request body for POST /relationships (snake_case fields)"""
    source_table: str = Field(..., min_length=1, max_length=255)
    target_table: str = Field(..., min_length=1, max_length=255)
    source_column: str = Field(..., min_length=1, max_length=255)
    target_column: str = Field(..., min_length=1, max_length=255)
    relationship_type: RelationshipType = RelationshipType.FOREIGN_KEY
    description: Optional[str] = Field(default="", max_length=1000)
