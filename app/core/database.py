"""
Database engines (primary e-commerce data + vector store)
"""
import logging
from typing import AsyncIterator, Dict, Any, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings

# Import models to register them with SQLModel metadata
from app.models import TableRelationship  # noqa: F401

logger = logging.getLogger(__name__)

_primary_engine: Optional[AsyncEngine] = None
_vector_engine: Optional[AsyncEngine] = None


def get_primary_engine() -> AsyncEngine:
    """Engine for the analytics database (read path for NLQ and dashboard)"""
    global _primary_engine
    if _primary_engine is None:
        _primary_engine = create_async_engine(
            settings.PRIMARY_DB_URL,
            pool_pre_ping=True,
            pool_size=settings.PRIMARY_POOL_SIZE,
            pool_timeout=2,
        )
        logger.info("Primary database engine initialized")
    return _primary_engine


def get_vector_engine() -> AsyncEngine:
    """Engine for schema metadata, embeddings and table relationships"""
    global _vector_engine
    if _vector_engine is None:
        _vector_engine = create_async_engine(
            settings.VECTOR_DB_URL,
            pool_pre_ping=True,
            pool_size=settings.VECTOR_POOL_SIZE,
            pool_timeout=2,
        )
        logger.info("Vector database engine initialized")
    return _vector_engine


async def vector_session() -> AsyncIterator[AsyncSession]:
    """Dependency for getting a vector-store session"""
    async with AsyncSession(get_vector_engine(), expire_on_commit=False) as session:
        yield session


SCHEMA_METADATA_DDL = [
    "CREATE EXTENSION IF NOT EXISTS vector",
    """
    CREATE TABLE IF NOT EXISTS schema_metadata (
        id SERIAL PRIMARY KEY,
        table_name VARCHAR(255) NOT NULL,
        column_name VARCHAR(255),
        data_type VARCHAR(100),
        is_nullable BOOLEAN DEFAULT true,
        column_default TEXT,
        description TEXT,
        embedding vector({dimensions}),
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS schema_metadata_embedding_idx
    ON schema_metadata USING ivfflat (embedding vector_cosine_ops)
    WITH (lists = 100)
    """,
]


async def init_vector_store() -> None:
    """Create pgvector extension, metadata table and relationships table"""
    engine = get_vector_engine()
    async with engine.begin() as conn:
        for statement in SCHEMA_METADATA_DDL:
            await conn.execute(text(statement.format(dimensions=settings.EMBEDDING_DIMENSIONS)))
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Schema metadata tables initialized")


async def check_connections() -> Dict[str, Any]:
    """
    Test both database connections

    Returns:
        {"primary": bool, "vector": bool, "errors": [...]}
    """
    results: Dict[str, Any] = {"primary": False, "vector": False, "errors": []}

    for name, engine_factory in (("primary", get_primary_engine), ("vector", get_vector_engine)):
        try:
            async with engine_factory().connect() as conn:
                await conn.execute(text("SELECT NOW()"))
            results[name] = True
        except Exception as e:
            results["errors"].append(f"{name.capitalize()} DB: {e}")
            logger.error(f"{name.capitalize()} database connection failed: {e}")

    return results


async def close_connections() -> None:
    """Dispose both engines"""
    global _primary_engine, _vector_engine
    if _primary_engine is not None:
        await _primary_engine.dispose()
        _primary_engine = None
    if _vector_engine is not None:
        await _vector_engine.dispose()
        _vector_engine = None
    logger.info("All database connections closed")
