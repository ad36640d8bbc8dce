"""
Schema catalog helpers
Text forms of schema metadata, used for embeddings and LLM context
"""
from typing import Dict, Any, List, Sequence

from app.dtos import SchemaContextItem
from app.models import TableRelationship


def describe_column(row: Dict[str, Any]) -> str:
    """
    Build the text that gets embedded for one column

    Example: "Table: orders, Column: status, Type: text, Not null, Default: 'pending'"
    """
    parts = [
        f"Table: {row.get('table_name')}",
        f"Column: {row.get('column_name')}",
        f"Type: {row.get('data_type')}",
        "Nullable" if _is_nullable(row.get("is_nullable")) else "Not null",
    ]
    if row.get("column_default"):
        parts.append(f"Default: {row['column_default']}")
    if row.get("description"):
        parts.append(f"Description: {row['description']}")
    return ", ".join(parts)


def _is_nullable(value: Any) -> bool:
    if isinstance(value, str):
        return value.upper() == "YES"
    return bool(value)


def context_tables(schema_context: Sequence[SchemaContextItem]) -> List[str]:
    """Distinct table names, in ranking order"""
    seen: List[str] = []
    for item in schema_context:
        if item.table not in seen:
            seen.append(item.table)
    return seen


def format_schema_context(schema_context: Sequence[SchemaContextItem]) -> str:
    """
    Group ranked schema items by table for the prompt

    Output:
        Table: orders
          - status (text): Order lifecycle state
    """
    grouped: Dict[str, List[SchemaContextItem]] = {}
    for item in schema_context:
        grouped.setdefault(item.table, []).append(item)

    lines: List[str] = []
    for table, items in grouped.items():
        lines.append(f"Table: {table}")
        for item in items:
            if not item.column:
                continue
            desc = f": {item.description}" if item.description else ""
            lines.append(f"  - {item.column} ({item.data_type or 'unknown'}){desc}")
    return "\n".join(lines)


def format_relationships(relationships: Sequence[TableRelationship]) -> str:
    """One line per relationship; empty string when there are none"""
    return "\n".join(f"- {rel.describe()}" for rel in relationships)
