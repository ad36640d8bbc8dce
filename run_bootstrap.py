"""
Script to bootstrap the schema-aware vector store

Creates the pgvector extension, schema_metadata and table_relationships,
then embeds every column of the primary database.
"""
import asyncio
import logging

from app.core.config import settings
from app.core.database import init_vector_store, get_primary_engine, get_vector_engine, close_connections
from app.core.logging_config import configure_logging
from app.pipeline.llm import LLMClient
from app.repositories import SchemaRepository
from app.services import SchemaContextFinder

logger = logging.getLogger("run_bootstrap")


async def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    try:
        await init_vector_store()

        finder = SchemaContextFinder(
            LLMClient(),
            SchemaRepository(get_primary_engine(), get_vector_engine()),
            get_vector_engine()
        )
        count = await finder.refresh_schema_metadata()
        logger.info(f"Bootstrap finished: {count} schema entries embedded")
    finally:
        await close_connections()


if __name__ == "__main__":
    asyncio.run(main())
