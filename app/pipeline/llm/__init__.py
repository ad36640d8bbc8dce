"""
LLM utilities (client, prompts, parsers)
"""
from app.pipeline.llm.client import LLMClient
from app.pipeline.llm.prompts import build_sql_generation_prompt
from app.pipeline.llm.parsers import parse_sql, calculate_confidence, extract_explanation

__all__ = [
    "LLMClient",
    "build_sql_generation_prompt",
    "parse_sql",
    "calculate_confidence",
    "extract_explanation",
]
