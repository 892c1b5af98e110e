"""Perplexity service - web-grounded chat answers over the HTTP API"""

import logging
from typing import Optional

import httpx

from ..config import PERPLEXITY_API_KEY, PERPLEXITY_API_URL, PERPLEXITY_MODEL
from ..models import Property
from .anthropic_service import CHAT_SYSTEM_PROMPT, EMPTY_REPLY, build_chat_messages
from .property_context import format_property_context

logger = logging.getLogger(__name__)

MAX_CITATIONS = 3


def format_response_with_citations(content: Optional[str], citations: Optional[list]) -> str:
    """Append up to three numbered sources under a 'Sources:' heading"""
    text = content or EMPTY_REPLY
    if citations:
        text += "\n\nSources:"
        for index, citation in enumerate(citations[:MAX_CITATIONS], start=1):
            text += f"\n{index}. {citation}"
    return text


class PerplexityService:
    """Service for Perplexity chat completions"""

    def __init__(self):
        self.api_key = PERPLEXITY_API_KEY
        self.model = PERPLEXITY_MODEL
        if not self.api_key:
            logger.info("PERPLEXITY_API_KEY not set; chat will use Anthropic")

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def handle_chat(
        self,
        message: str,
        chat_history: Optional[list[dict]] = None,
        property_context: Optional[Property] = None,
    ) -> str:
        """Raises on transport or API errors so the caller can fall back"""
        if not self.is_available():
            raise RuntimeError("Perplexity not configured")

        system_message = {
            "role": "system",
            "content": CHAT_SYSTEM_PROMPT + format_property_context(property_context),
        }
        payload = {
            "model": self.model,
            "messages": [system_message] + build_chat_messages(message, chat_history),
            "temperature": 0.2,
            "max_tokens": 500,
            "top_p": 0.9,
            "search_recency_filter": "month",
            "stream": False,
            "frequency_penalty": 1,
        }

        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                PERPLEXITY_API_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
            )

        if response.status_code != 200:
            logger.error(f"❌ Perplexity API error: HTTP {response.status_code}")
            raise RuntimeError(f"Perplexity API error: {response.status_code} - {response.text}")

        data = response.json()
        choices = data.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content")
        return format_response_with_citations(content, data.get("citations"))


# Singleton instance
perplexity_service = PerplexityService()
