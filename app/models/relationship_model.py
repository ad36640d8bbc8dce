"""
Table relationship model
Foreign-key-like links between tables, used to enrich LLM prompts
"""
from typing import List, Optional
from datetime import datetime
from sqlalchemy import Column, Text, or_
from sqlmodel import SQLModel, Field, select
from sqlmodel.ext.asyncio.session import AsyncSession


class TableRelationship(SQLModel, table=True):
    __tablename__ = "table_relationships"

    id: Optional[int] = Field(default=None, primary_key=True)
    source_table: str = Field(max_length=255, index=True)
    target_table: str = Field(max_length=255, index=True)
    source_column: str = Field(max_length=255)
    target_column: str = Field(max_length=255)
    relationship_type: str = Field(default="foreign_key", max_length=50)
    description: Optional[str] = Field(default="", sa_column=Column(Text))
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    async def list_for_tables(
        cls,
        db: AsyncSession,
        tables: Optional[List[str]] = None
    ) -> List["TableRelationship"]:
        """Relationships where either side is one of `tables` (all when None)"""
        stmt = select(cls)
        if tables:
            stmt = stmt.where(or_(cls.source_table.in_(tables), cls.target_table.in_(tables)))
        stmt = stmt.order_by(cls.source_table, cls.target_table)
        result = await db.exec(stmt)
        return list(result.all())

    @classmethod
    async def create(cls, db: AsyncSession, **data) -> "TableRelationship":
        rel = cls(**data)
        db.add(rel)
        await db.commit()
        await db.refresh(rel)
        return rel

    def describe(self) -> str:
        """One-line prompt form: orders.customer_id -> customers.id (foreign_key)"""
        line = (
            f"{self.source_table}.{self.source_column} -> "
            f"{self.target_table}.{self.target_column} ({self.relationship_type})"
        )
        if self.description:
            line += f" - {self.description}"
        return line
