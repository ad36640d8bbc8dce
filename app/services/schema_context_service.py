"""
Service for schema awareness
Vector search over schema metadata, relationships, metadata refresh
"""
import logging
from typing import List, Dict, Any, Optional

from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel.ext.asyncio.session import AsyncSession

from app.dtos import SchemaContextItem
from app.models import TableRelationship
from app.pipeline.llm import LLMClient
from app.pipeline.sql import describe_column
from app.repositories import SchemaRepository

logger = logging.getLogger(__name__)


class SchemaContextFinder:
    """Maps a question to the schema elements and relationships it most likely needs"""

    def __init__(
        self,
        llm: LLMClient,
        repository: SchemaRepository,
        vector_engine: AsyncEngine
    ):
        self.llm = llm
        self.repository = repository
        self.vector_engine = vector_engine

    def _session(self) -> AsyncSession:
        return AsyncSession(self.vector_engine, expire_on_commit=False)

    async def find_relevant_schema(self, query: str, limit: int = 15) -> List[SchemaContextItem]:
        """
        Embed the question and return the top-`limit` schema items

        Raises:
            LLMProviderError: embedding could not be produced
        """
        embedding = await self.llm.generate_embedding(query)
        items = await self.repository.find_relevant_schema(embedding, limit)
        logger.info(f"Found {len(items)} relevant schema items for query")
        return items

    async def get_relationships(self, tables: Optional[List[str]] = None) -> List[TableRelationship]:
        async with self._session() as session:
            return await TableRelationship.list_for_tables(session, tables)

    async def add_relationship(self, data: Dict[str, Any]) -> TableRelationship:
        async with self._session() as session:
            rel = await TableRelationship.create(session, **data)
        logger.info(f"Added relationship: {rel.source_table} -> {rel.target_table}")
        return rel

    async def get_schema_info(self) -> Dict[str, Any]:
        """Tables with their columns, as stored in schema_metadata"""
        tables = await self.repository.get_all_tables()
        schema: Dict[str, Any] = {}
        for table in tables:
            schema[table] = await self.repository.get_table_columns(table)
        return {"schema": schema, "tableCount": len(tables)}

    async def refresh_schema_metadata(self, schema_name: str = "public") -> int:
        """
        Re-extract the primary catalog and re-embed every column

        Embeddings are computed before the existing rows are replaced, so a
        provider failure leaves the stored metadata untouched.
        """
        logger.info("Refreshing schema metadata...")
        rows = await self.repository.extract_schema(schema_name)

        entries = []
        for row in rows:
            description = describe_column(row)
            entries.append({
                **row,
                "is_nullable": str(row.get("is_nullable", "")).upper() == "YES",
                "embedding": await self.llm.generate_embedding(description),
            })

        count = await self.repository.replace_metadata(entries)
        logger.info(f"Schema metadata refreshed: {count} entries")
        return count
