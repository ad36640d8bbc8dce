"""
LLM client for Azure OpenAI
Chat completions for SQL generation, embeddings for schema search
"""
import httpx
import logging
from typing import List, Optional, Sequence

from app.core.config import settings
from app.core.errors import LLMProviderError
from app.dtos import GeneratedSQL, SchemaContextItem
from app.models import TableRelationship
from app.pipeline.llm.prompts import build_sql_generation_prompt
from app.pipeline.llm.parsers import parse_sql, calculate_confidence, extract_explanation
from app.pipeline.sql.catalog import format_schema_context, format_relationships

logger = logging.getLogger(__name__)

# The provider's HTTP timeout is the only bound on upstream calls; no retries
LLM_TIMEOUT = httpx.Timeout(30.0, connect=10.0)


class LLMClient:
    """Thin async wrapper around the Azure OpenAI REST API"""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        api_key: Optional[str] = None,
        deployment: Optional[str] = None,
        embedding_deployment: Optional[str] = None,
        api_version: Optional[str] = None,
        dimensions: Optional[int] = None,
        disabled: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.endpoint = (endpoint or settings.AZURE_OPENAI_ENDPOINT).rstrip("/")
        self.api_key = api_key or settings.AZURE_OPENAI_API_KEY
        self.deployment = deployment or settings.AZURE_OPENAI_DEPLOYMENT
        self.embedding_deployment = embedding_deployment or settings.AZURE_OPENAI_EMBEDDING_DEPLOYMENT
        self.api_version = api_version or settings.AZURE_OPENAI_API_VERSION
        self.dimensions = dimensions or settings.EMBEDDING_DIMENSIONS
        self.disabled = settings.DISABLE_LLM if disabled is None else disabled
        self._transport = transport

    @property
    def model_name(self) -> str:
        return self.deployment or "azure-openai"

    def _url(self, deployment: str, operation: str) -> str:
        return (
            f"{self.endpoint}/openai/deployments/"
            f"{deployment}/{operation}?"
            f"api-version={self.api_version}"
        )

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "api-key": self.api_key
        }

    async def _post(self, url: str, payload: dict) -> dict:
        if self.disabled:
            raise LLMProviderError("LLM provider is disabled (DISABLE_LLM)")
        if not self.endpoint or not self.api_key:
            raise LLMProviderError("Azure OpenAI endpoint/key not configured")

        try:
            async with httpx.AsyncClient(timeout=LLM_TIMEOUT, transport=self._transport) as client:
                response = await client.post(url, headers=self._headers(), json=payload)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"LLM provider returned HTTP {e.response.status_code}")
            raise LLMProviderError(f"LLM provider returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"LLM provider request failed: {e}")
            raise LLMProviderError(f"LLM provider request failed: {e}") from e
        except ValueError as e:
            raise LLMProviderError(f"LLM provider returned invalid JSON: {e}") from e

    async def chat(
        self,
        messages: list[dict],
        temperature: float = 0.1,
        max_tokens: int = 800
    ) -> str:
        """Call chat completions and return the content string directly"""
        data = await self._post(
            self._url(self.deployment, "chat/completions"),
            {"messages": messages, "temperature": temperature, "max_tokens": max_tokens}
        )
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise LLMProviderError(f"Unexpected chat completion payload: {e}") from e

    async def generate_embedding(self, text: str) -> List[float]:
        """
        Embed text with the embedding deployment

        Raises:
            LLMProviderError: HTTP failure or a vector of the wrong length
        """
        data = await self._post(
            self._url(self.embedding_deployment, "embeddings"),
            {"input": text}
        )
        try:
            embedding = [float(x) for x in data["data"][0]["embedding"]]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise LLMProviderError(f"Invalid embedding format received: {e}") from e

        if len(embedding) != self.dimensions:
            raise LLMProviderError(
                f"Invalid embedding format received: expected {self.dimensions} "
                f"dimensions, got {len(embedding)}"
            )
        return embedding

    async def generate_sql(
        self,
        query: str,
        schema_context: Sequence[SchemaContextItem],
        relationships: Sequence[TableRelationship] = (),
        language: str = "en"
    ) -> GeneratedSQL:
        """
        Convert a natural-language question into SQL

        Raises:
            SQLGenerationError: the reply contains no SQL
            LLMProviderError: provider unreachable
        """
        messages = build_sql_generation_prompt(
            query,
            format_schema_context(schema_context),
            format_relationships(relationships),
            language
        )
        reply = await self.chat(messages)

        return GeneratedSQL(
            sql=parse_sql(reply),
            confidence=calculate_confidence(reply),
            explanation=extract_explanation(reply),
            model=self.model_name,
        )

    async def ping(self) -> bool:
        """Cheap reachability probe for health checks"""
        try:
            await self.chat([{"role": "user", "content": "ping"}], temperature=0.0, max_tokens=1)
            return True
        except LLMProviderError as e:
            logger.warning(f"LLM health check failed: {e}")
            return False
