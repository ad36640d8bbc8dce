"""
Repository for schema metadata (primary catalog + vector store)
"""
import logging
from typing import List, Dict, Any, Sequence

from sqlalchemy import text as sqltext
from sqlalchemy.ext.asyncio import AsyncEngine

from app.dtos import SchemaContextItem

logger = logging.getLogger(__name__)


def embedding_literal(embedding: Sequence[float]) -> str:
    """pgvector text form: [0.1,0.2,...]"""
    return "[" + ",".join(str(float(x)) for x in embedding) + "]"


class SchemaRepository:
    """Reads the primary catalog and reads/writes schema_metadata in the vector store"""

    def __init__(self, primary_engine: AsyncEngine, vector_engine: AsyncEngine):
        self.primary_engine = primary_engine
        self.vector_engine = vector_engine

    async def extract_schema(self, schema_name: str = "public") -> List[Dict[str, Any]]:
        """
        Column-level catalog of base tables in the primary database

        Returns rows with table_name, column_name, data_type, is_nullable,
        column_default and description (column comment, '' when absent).
        """
        async with self.primary_engine.connect() as conn:
            rs = await conn.execute(
                sqltext("""
                    SELECT
                        t.table_name,
                        c.column_name,
                        c.data_type,
                        c.is_nullable,
                        c.column_default,
                        COALESCE(pgd.description, '') AS description
                    FROM information_schema.tables t
                    JOIN information_schema.columns c
                      ON t.table_name = c.table_name AND t.table_schema = c.table_schema
                    LEFT JOIN pg_namespace pgn ON pgn.nspname = t.table_schema
                    LEFT JOIN pg_class pgc ON pgc.relname = t.table_name AND pgc.relnamespace = pgn.oid
                    LEFT JOIN pg_description pgd
                      ON pgd.objoid = pgc.oid AND pgd.objsubid = c.ordinal_position
                    WHERE t.table_schema = :schema
                      AND t.table_type = 'BASE TABLE'
                    ORDER BY t.table_name, c.ordinal_position
                """),
                {"schema": schema_name}
            )
            rows = [dict(row) for row in rs.mappings().all()]

        logger.info(f"Extracted {len(rows)} columns from schema '{schema_name}'")
        return rows

    async def replace_metadata(self, entries: List[Dict[str, Any]]) -> int:
        """
        Replace every schema_metadata row in one transaction

        Args:
            entries: dicts with table_name, column_name, data_type, is_nullable,
                     column_default, description and embedding (list of floats)
        """
        params = [
            {
                "table_name": e["table_name"],
                "column_name": e.get("column_name"),
                "data_type": e.get("data_type"),
                "is_nullable": bool(e.get("is_nullable")),
                "column_default": e.get("column_default"),
                "description": e.get("description") or "",
                "embedding": embedding_literal(e["embedding"]),
            }
            for e in entries
        ]

        async with self.vector_engine.begin() as conn:
            await conn.execute(sqltext("DELETE FROM schema_metadata"))
            if params:
                await conn.execute(
                    sqltext("""
                        INSERT INTO schema_metadata
                            (table_name, column_name, data_type, is_nullable,
                             column_default, description, embedding)
                        VALUES
                            (:table_name, :column_name, :data_type, :is_nullable,
                             :column_default, :description, CAST(:embedding AS vector))
                    """),
                    params
                )

        logger.info(f"Stored {len(params)} schema metadata entries")
        return len(params)

    async def find_relevant_schema(
        self,
        embedding: Sequence[float],
        limit: int = 10
    ) -> List[SchemaContextItem]:
        """Nearest schema elements by cosine distance (similarity = 1 - distance)"""
        async with self.vector_engine.connect() as conn:
            rs = await conn.execute(
                sqltext("""
                    SELECT
                        table_name,
                        column_name,
                        data_type,
                        description,
                        1 - (embedding <=> CAST(:embedding AS vector)) AS similarity
                    FROM schema_metadata
                    WHERE embedding IS NOT NULL
                    ORDER BY embedding <=> CAST(:embedding AS vector)
                    LIMIT :limit
                """),
                {"embedding": embedding_literal(embedding), "limit": limit}
            )
            rows = rs.mappings().all()

        return [
            SchemaContextItem(
                table=row["table_name"],
                column=row["column_name"],
                data_type=row["data_type"],
                description=row["description"],
                similarity_score=float(row["similarity"] or 0.0),
            )
            for row in rows
        ]

    async def get_all_tables(self) -> List[str]:
        async with self.vector_engine.connect() as conn:
            rs = await conn.execute(sqltext(
                "SELECT DISTINCT table_name FROM schema_metadata ORDER BY table_name"
            ))
            return [row[0] for row in rs.all()]

    async def get_table_columns(self, table_name: str) -> List[Dict[str, Any]]:
        async with self.vector_engine.connect() as conn:
            rs = await conn.execute(
                sqltext("""
                    SELECT column_name, data_type, is_nullable, description
                    FROM schema_metadata
                    WHERE table_name = :table
                    ORDER BY column_name
                """),
                {"table": table_name}
            )
            return [dict(row) for row in rs.mappings().all()]
