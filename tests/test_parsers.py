import pytest

from app.core.errors import ErrorKind, SQLGenerationError
from app.dtos import SchemaContextItem
from app.models import TableRelationship
from app.pipeline.llm import build_sql_generation_prompt, parse_sql, calculate_confidence, extract_explanation
from app.pipeline.sql.catalog import describe_column, context_tables, format_schema_context, format_relationships


# ============================================
# SQL EXTRACTION
# ============================================

def test_parse_sql_fence():
    reply = "Here you go:\n```sql\nSELECT id FROM customers;\n```\nLists customer ids."
    assert parse_sql(reply) == "SELECT id FROM customers;"


def test_parse_any_fence():
    reply = "```\nSELECT COUNT(*) FROM orders\n```"
    assert parse_sql(reply) == "SELECT COUNT(*) FROM orders"


def test_parse_bare_select():
    reply = "The answer is SELECT name FROM products WHERE price > 10; which filters by price"
    assert parse_sql(reply) == "SELECT name FROM products WHERE price > 10;"


def test_parse_does_not_apply_safety_rules():
    """Extraction and validation are separate steps"""
    assert parse_sql("```sql\nDROP TABLE customers\n```") == "DROP TABLE customers"


@pytest.mark.parametrize("reply", ["", "I cannot answer that question.", "Sorry, the schema has no such data"])
def test_parse_without_sql(reply):
    with pytest.raises(SQLGenerationError) as exc_info:
        parse_sql(reply)
    assert exc_info.value.kind == ErrorKind.GENERATION_FAILED
    assert exc_info.value.message == "SQL generation failed: No SQL query found in response"


# ============================================
# CONFIDENCE / EXPLANATION
# ============================================

def test_confidence_with_structure_bonus():
    assert calculate_confidence("```sql\nSELECT id FROM customers\n```") == pytest.approx(0.8)


def test_confidence_bonus_is_case_sensitive():
    assert calculate_confidence("select id from customers") == pytest.approx(0.6)


def test_confidence_is_capped():
    reply = "SELECT c.id FROM customers c JOIN orders o ON o.customer_id = c.id WHERE 1=1 GROUP BY c.id ORDER BY c.id"
    assert calculate_confidence(reply) == pytest.approx(1.0)


def test_confidence_floor():
    assert calculate_confidence("no sql here") == 0.5


def test_extract_explanation():
    reply = "```sql\nSELECT 1\n```\nReturns the number one."
    assert extract_explanation(reply) == "Returns the number one."
    assert extract_explanation("SELECT 1;") == ""


# ============================================
# PROMPT / CATALOG TEXT
# ============================================

def test_prompt_includes_schema_and_relationships():
    messages = build_sql_generation_prompt(
        "top customers", "Table: customers\n  - id (integer)", "- orders.customer_id -> customers.id (foreign_key)"
    )

    assert [m["role"] for m in messages] == ["system", "user"]
    assert "Available Schema:\nTable: customers" in messages[0]["content"]
    assert "Table Relationships:" in messages[0]["content"]
    assert '"top customers"' in messages[1]["content"]


def test_prompt_language_fallback():
    hindi = build_sql_generation_prompt("q", "", "", language="hi")
    unknown = build_sql_generation_prompt("q", "", "", language="fr")
    english = build_sql_generation_prompt("q", "", "")

    assert hindi[0]["content"] != english[0]["content"]
    assert unknown == english
    assert "Table Relationships:" not in english[0]["content"]


def test_describe_column():
    row = {
        "table_name": "orders",
        "column_name": "status",
        "data_type": "text",
        "is_nullable": "NO",
        "column_default": "'pending'::text",
        "description": None,
    }
    assert describe_column(row) == "Table: orders, Column: status, Type: text, Not null, Default: 'pending'::text"


def test_schema_context_grouping():
    items = [
        SchemaContextItem(table="orders", column="status", data_type="text", description="Order state"),
        SchemaContextItem(table="customers", column="id", data_type="integer"),
        SchemaContextItem(table="orders", column="total_amount", data_type="numeric"),
    ]

    assert context_tables(items) == ["orders", "customers"]
    assert format_schema_context(items) == (
        "Table: orders\n"
        "  - status (text): Order state\n"
        "  - total_amount (numeric)\n"
        "Table: customers\n"
        "  - id (integer)"
    )


def test_format_relationships():
    rel = TableRelationship(
        source_table="orders", source_column="customer_id",
        target_table="customers", target_column="id",
        description="",
    )
    assert format_relationships([rel]) == "- orders.customer_id -> customers.id (foreign_key)"
    assert format_relationships([]) == ""
