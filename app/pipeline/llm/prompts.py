"""
All LLM prompts consolidated in one place
"""
from typing import Dict, Any


# ============================================
# SQL GENERATION PROMPTS
# ============================================

PROMPTS: Dict[str, Dict[str, Any]] = {
    "en": {
        "role": (
            "You are an expert SQL query generator. Convert natural language "
            "questions into optimized PostgreSQL queries."
        ),
        "rules": [
            "Always use proper SQL syntax and PostgreSQL-specific functions",
            "Include appropriate WHERE clauses for filtering",
            "Use proper JOIN syntax for multi-table queries",
            "Add LIMIT clauses for 'top N' queries",
            "Use aggregate functions (SUM, COUNT, AVG, etc.) when appropriate",
            "Handle date/time queries with proper date functions",
            "Never include DROP, DELETE, UPDATE, or INSERT statements",
            "Always validate table and column names against the provided schema",
            "Put the query in a ```sql code block, followed by a one-sentence explanation",
        ],
        "schema_header": "Available Schema:",
        "relationships_header": "Table Relationships:",
        "user": 'Convert this natural language query to SQL:\n"{query}"',
    },
    "hi": {
        "role": (
            "आप एक विशेषज्ञ SQL क्वेरी जेनरेटर हैं। प्राकृतिक भाषा के प्रश्नों को "
            "अनुकूलित PostgreSQL क्वेरीज़ में बदलें।"
        ),
        "rules": [
            "हमेशा उचित SQL सिंटैक्स और PostgreSQL-विशिष्ट फ़ंक्शन का उपयोग करें",
            "फ़िल्टरिंग के लिए उपयुक्त WHERE क्लॉज़ शामिल करें",
            "मल्टी-टेबल क्वेरीज़ के लिए उचित JOIN सिंटैक्स का उपयोग करें",
            "'शीर्ष N' क्वेरीज़ के लिए LIMIT क्लॉज़ जोड़ें",
            "जब उपयुक्त हो तो एग्रीगेट फ़ंक्शन (SUM, COUNT, AVG, आदि) का उपयोग करें",
            "उचित तिथि फ़ंक्शन के साथ तिथि/समय क्वेरीज़ को हैंडल करें",
            "कभी भी DROP, DELETE, UPDATE, या INSERT स्टेटमेंट शामिल न करें",
            "हमेशा प्रदान किए गए स्कीमा के खिलाफ़ टेबल और कॉलम नामों को मान्य करें",
            "क्वेरी को ```sql कोड ब्लॉक में लिखें, उसके बाद एक वाक्य में स्पष्टीकरण दें",
        ],
        "schema_header": "उपलब्ध स्कीमा:",
        "relationships_header": "टेबल संबंध:",
        "user": 'इस प्राकृतिक भाषा क्वेरी को SQL में बदलें:\n"{query}"',
    },
}


def prompt_language(language: str) -> Dict[str, Any]:
    """Prompt set for a language (unknown languages fall back to English)"""
    return PROMPTS.get(language) or PROMPTS["en"]


def build_sql_generation_prompt(
    query: str,
    schema_text: str,
    relationships_text: str,
    language: str = "en"
) -> list[dict]:
    """Build NL→SQL prompt"""
    prompt = prompt_language(language)

    rules = "\n".join(f"- {rule}" for rule in prompt["rules"])
    system = f"{prompt['role']}\n\nRules:\n{rules}"

    if schema_text:
        system += f"\n\n{prompt['schema_header']}\n{schema_text}"
    if relationships_text:
        system += f"\n\n{prompt['relationships_header']}\n{relationships_text}"

    return [
        {"role": "system", "content": system},
        {"role": "user", "content": prompt["user"].format(query=query)}
    ]
