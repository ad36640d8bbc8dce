import pytest

from app.core.errors import ErrorKind
from app.pipeline.sql import SafetyValidator
from app.pipeline.sql.protector import contains_dangerous_subquery


@pytest.fixture
def validator():
    return SafetyValidator()


@pytest.mark.parametrize("sql", [
    "SELECT * FROM customers",
    "SELECT id, name FROM customers",
    "   select id from orders where total_amount > 100",
    "SELECT c.name, SUM(o.total_amount) FROM customers c JOIN orders o ON o.customer_id = c.id GROUP BY c.name",
])
def test_accepts_plain_selects(validator, sql):
    """Ordinary read queries are accepted"""
    verdict = validator.validate(sql)
    assert verdict.accepted
    assert verdict.kind is None


@pytest.mark.parametrize("sql", ["", "   ", "\n\t"])
def test_empty_query(validator, sql):
    verdict = validator.validate(sql)
    assert verdict.rejected
    assert verdict.kind == ErrorKind.EMPTY_QUERY


@pytest.mark.parametrize("sql, keyword", [
    ("DROP TABLE customers", "DROP"),
    ("DELETE FROM customers", "DELETE"),
    ("UPDATE orders SET status = 'x'", "UPDATE"),
    ("INSERT INTO orders VALUES (1)", "INSERT"),
    ("ALTER TABLE orders ADD COLUMN x int", "ALTER"),
    ("TRUNCATE orders", "TRUNCATE"),
    ("GRANT ALL ON orders TO public", "GRANT"),
    ("REVOKE ALL ON orders FROM public", "REVOKE"),
    ("SELECT 1; EXECUTE my_plan", "EXEC"),
])
def test_dangerous_keywords(validator, sql, keyword):
    verdict = validator.validate(sql)
    assert verdict.kind == ErrorKind.DANGEROUS_OPERATION
    assert keyword in verdict.reason


def test_keyword_match_ignores_word_boundaries(validator):
    """Substring match: a column name containing a keyword is rejected too"""
    verdict = validator.validate("SELECT update_count FROM orders")
    assert verdict.kind == ErrorKind.DANGEROUS_OPERATION

    verdict = validator.validate("select created_at from orders")
    assert verdict.kind == ErrorKind.DANGEROUS_OPERATION


@pytest.mark.parametrize("sql", [
    "SELECT * FROM pg_user",
    "select * from PG_STAT_ACTIVITY",
    "SELECT * FROM information_schema.tables",
    "SELECT * FROM sys.objects",
    "SELECT * FROM mysql.user",
    "SELECT * FROM performance_schema.threads",
])
def test_system_tables(validator, sql):
    verdict = validator.validate(sql)
    assert verdict.kind == ErrorKind.SYSTEM_TABLE_ACCESS


def test_system_functions_hit_system_table_check_first(validator):
    """pg_* functions carry the PG_ marker, which is checked before functions"""
    verdict = validator.validate("SELECT pg_read_file('/etc/passwd')")
    assert verdict.kind == ErrorKind.SYSTEM_TABLE_ACCESS


@pytest.mark.parametrize("sql", [
    "COPY customers TO '/tmp/out.csv'",
    "\\copy customers to 'out.csv'",
    "SELECT * FROM customers; COPY orders FROM '/tmp/x'",
])
def test_file_system_access(validator, sql):
    verdict = validator.validate(sql)
    assert verdict.kind == ErrorKind.FILE_SYSTEM_ACCESS


@pytest.mark.parametrize("sql", [
    "SELECT lo_import('/etc/passwd')",
    "SELECT lo_export(1234, '/tmp/blob')",
    "SELECT * FROM dblink('host=evil', 'select 1') AS t(x int)",
])
def test_dangerous_functions(validator, sql):
    verdict = validator.validate(sql)
    assert verdict.kind == ErrorKind.DANGEROUS_FUNCTION


@pytest.mark.parametrize("sql", [
    "WITH recent AS (SELECT * FROM orders) SELECT * FROM recent",
    "SHOW search_path",
    "EXPLAIN SELECT * FROM orders",
    "(SELECT 1)",
])
def test_not_a_select(validator, sql):
    verdict = validator.validate(sql)
    assert verdict.kind == ErrorKind.NOT_A_SELECT


def test_first_violation_wins(validator):
    """Check order: keywords before system tables before SELECT-ness"""
    verdict = validator.validate("DELETE FROM pg_user")
    assert verdict.kind == ErrorKind.DANGEROUS_OPERATION

    verdict = validator.validate("COPY (SELECT * FROM pg_user) TO '/tmp/x'")
    assert verdict.kind == ErrorKind.SYSTEM_TABLE_ACCESS

    verdict = validator.validate("VALUES (lo_import('/x'))")
    assert verdict.kind == ErrorKind.DANGEROUS_FUNCTION


def test_subquery_patterns():
    assert contains_dangerous_subquery("SELECT * FROM orders WHERE id IN (SELECT oid FROM pg_class)")
    assert contains_dangerous_subquery("select x from (select * from information_schema.columns) c")
    assert contains_dangerous_subquery("SELECT a\nFROM t WHERE b IN (SELECT b FROM sys.tables)")
    assert not contains_dangerous_subquery("SELECT * FROM orders WHERE id IN (SELECT order_id FROM order_items)")


def test_validate_is_idempotent(validator):
    for sql in ["SELECT * FROM customers", "DROP TABLE customers", "SELECT * FROM pg_user", ""]:
        assert validator.validate(sql) == validator.validate(sql)


def test_validate_does_not_touch_input(validator):
    sql = "  select id from customers  "
    validator.validate(sql)
    assert sql == "  select id from customers  "
