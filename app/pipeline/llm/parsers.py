"""
LLM response parsers
"""
import re
import logging

from app.core.errors import SQLGenerationError

logger = logging.getLogger(__name__)

SQL_FENCE = re.compile(r"```sql\s*([\s\S]*?)\s*```", re.I)
ANY_FENCE = re.compile(r"```\s*([\s\S]*?)\s*```", re.I)
BARE_SELECT = re.compile(r"(SELECT[\s\S]*?;)", re.I)
AFTER_FENCE = re.compile(r"```[\s\S]*?```\s*(.*)", re.I)

CONFIDENCE_KEYWORDS = ("SELECT", "FROM", "WHERE", "GROUP BY", "ORDER BY", "JOIN")


def parse_sql(response: str) -> str:
    """
    Extract the SQL statement from an LLM reply

    Tries a ```sql fence, then any fence, then the first SELECT ... ; run.
    No safety rules are applied here.

    Raises:
        SQLGenerationError: no SQL found in the reply
    """
    content = response or ""
    for pattern in (SQL_FENCE, ANY_FENCE, BARE_SELECT):
        match = pattern.search(content)
        if match and match.group(1).strip():
            sql = match.group(1).strip()
            logger.info(f"[parse_sql] Extracted SQL: {repr(sql[:200])}")
            return sql

    logger.warning(f"[parse_sql] No SQL found in response: {repr(content[:200])}")
    raise SQLGenerationError("SQL generation failed: No SQL query found in response")


def calculate_confidence(response: str) -> float:
    """Keyword heuristic, in [0.5, 1.0]"""
    upper = (response or "").upper()
    found = sum(1 for keyword in CONFIDENCE_KEYWORDS if keyword in upper)
    confidence = 0.5 + (found / len(CONFIDENCE_KEYWORDS)) * 0.3

    # Structural bonus only counts uppercase keywords in the raw reply
    if "SELECT" in (response or "") and "FROM" in (response or ""):
        confidence += 0.2

    return min(confidence, 1.0)


def extract_explanation(response: str) -> str:
    """Text on the line after the closing code fence, or empty"""
    match = AFTER_FENCE.search(response or "")
    return match.group(1).strip() if match else ""
