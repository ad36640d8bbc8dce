"""
SQL Protection
Decides whether a candidate SQL string may run, by lexical inspection only
"""
import re
import logging
from typing import Tuple, Pattern

from app.core.errors import ErrorKind
from app.dtos import SafetyVerdict

logger = logging.getLogger(__name__)

# Plain substring matches on the uppercased text (no word boundaries), so a
# column such as update_count is rejected too.
DANGEROUS_KEYWORDS: Tuple[str, ...] = (
    "DROP", "DELETE", "UPDATE", "INSERT", "ALTER", "CREATE",
    "TRUNCATE", "GRANT", "REVOKE", "EXEC", "EXECUTE",
)

SYSTEM_TABLE_MARKERS: Tuple[str, ...] = (
    "PG_", "INFORMATION_SCHEMA", "SYS", "MYSQL", "PERFORMANCE_SCHEMA",
)

FILE_SYSTEM_MARKERS: Tuple[str, ...] = ("\\COPY", "COPY")

DANGEROUS_FUNCTIONS: Tuple[str, ...] = (
    "pg_read_file", "pg_read_binary_file", "pg_ls_dir", "pg_stat_file",
    "lo_import", "lo_export", "dblink",
)

DANGEROUS_SUBQUERY_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"SELECT.*FROM.*pg_", re.I | re.S),
    re.compile(r"SELECT.*FROM.*information_schema", re.I | re.S),
    re.compile(r"SELECT.*FROM.*sys\.", re.I | re.S),
)


class SafetyValidator:
    """
    Pure predicate over a SQL string

    Checks run in a fixed order and the first violation wins:
    empty, dangerous keyword, system table, file system, dangerous function,
    not a SELECT, dangerous subquery.
    """

    def validate(self, sql: str) -> SafetyVerdict:
        """
        Validate a candidate query

        Args:
            sql: Raw SQL text (untrusted, whatever its origin)

        Returns:
            SafetyVerdict (accepted, or rejected with kind + reason)
        """
        if sql is None or not sql.strip():
            return SafetyVerdict.reject(ErrorKind.EMPTY_QUERY, "Query is empty")

        # Normalized copy for comparison only; the caller executes `sql` as given
        upper_sql = sql.upper().strip()

        for keyword in DANGEROUS_KEYWORDS:
            if keyword in upper_sql:
                return SafetyVerdict.reject(
                    ErrorKind.DANGEROUS_OPERATION,
                    f"Dangerous operation detected: {keyword} statements are not allowed"
                )

        for marker in SYSTEM_TABLE_MARKERS:
            if marker in upper_sql:
                return SafetyVerdict.reject(
                    ErrorKind.SYSTEM_TABLE_ACCESS,
                    f"Access to system table detected: {marker.lower()} access is not allowed"
                )

        for marker in FILE_SYSTEM_MARKERS:
            if marker in upper_sql:
                return SafetyVerdict.reject(
                    ErrorKind.FILE_SYSTEM_ACCESS,
                    "File system access operations are not allowed"
                )

        for func in DANGEROUS_FUNCTIONS:
            if func.upper() in upper_sql:
                return SafetyVerdict.reject(
                    ErrorKind.DANGEROUS_FUNCTION,
                    f"Dangerous function call detected: {func} is not allowed"
                )

        if not upper_sql.startswith("SELECT"):
            return SafetyVerdict.reject(ErrorKind.NOT_A_SELECT, "Only SELECT queries are allowed")

        if contains_dangerous_subquery(sql):
            return SafetyVerdict.reject(
                ErrorKind.DANGEROUS_SUBQUERY,
                "Query contains potentially dangerous subqueries"
            )

        return SafetyVerdict.accept()


def contains_dangerous_subquery(sql: str) -> bool:
    """Nested SELECT ... FROM that reaches a system catalog"""
    return any(pattern.search(sql) for pattern in DANGEROUS_SUBQUERY_PATTERNS)
