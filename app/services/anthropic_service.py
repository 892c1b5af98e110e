"""Anthropic service - property chat assistant and image search"""

import logging
from typing import Optional

from anthropic import AsyncAnthropic

from ..config import ANTHROPIC_API_KEY, ANTHROPIC_MODEL
from ..models import Property
from .property_context import format_property_context, split_data_url

logger = logging.getLogger(__name__)

CHAT_MAX_TOKENS = 500
CHAT_APOLOGY = (
    "I'm sorry, I'm having trouble connecting to my knowledge base right now. "
    "Please try again in a moment."
)
EMPTY_REPLY = "I couldn't generate a proper response. Please try again."

CHAT_SYSTEM_PROMPT = """You are a helpful and knowledgeable real estate assistant for our platform called Inmobi.
You provide information about properties, real estate trends, and advice to potential buyers.
Your responses should be friendly, professional, concise, and informative.
You should avoid making up specific details about properties that you don't know about.
When asked about property specifics, only use the information provided to you.
"""

IMAGE_SEARCH_PROMPT = (
    "Describe the property in this image as a short real estate search query. Mention the "
    "property type, architectural style, notable features and any visible location clues. "
    "Reply with the query only."
)


def build_chat_messages(message: str, chat_history: Optional[list[dict]]) -> list[dict]:
    """Prior turns followed by the new user message; unknown roles are dropped"""
    messages = [
        {"role": turn["role"], "content": turn["content"]}
        for turn in chat_history or []
        if turn.get("role") in ("user", "assistant") and turn.get("content")
    ]
    messages.append({"role": "user", "content": message})
    return messages


class AnthropicService:
    """Service for Anthropic Messages API operations"""

    def __init__(self):
        self.model = ANTHROPIC_MODEL
        self.client = None

        if not ANTHROPIC_API_KEY:
            logger.warning("ANTHROPIC_API_KEY not set; chat will answer with a fallback message")
        else:
            try:
                self.client = AsyncAnthropic(api_key=ANTHROPIC_API_KEY)
                logger.info(f"Anthropic client initialized (model={self.model})")
            except Exception as e:
                logger.error(f"Failed to initialize Anthropic client: {e}")
                self.client = None

    def is_available(self) -> bool:
        """Check if Anthropic client is available"""
        return self.client is not None

    async def handle_chat_message(
        self,
        message: str,
        chat_history: Optional[list[dict]] = None,
        property_context: Optional[Property] = None,
    ) -> str:
        if not self.is_available():
            return CHAT_APOLOGY

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=CHAT_MAX_TOKENS,
                system=CHAT_SYSTEM_PROMPT + format_property_context(property_context),
                messages=build_chat_messages(message, chat_history),
            )
            block = response.content[0] if response.content else None
            if block is not None and block.type == "text":
                return block.text
            return EMPTY_REPLY
        except Exception as e:
            logger.error(f"❌ Error in Anthropic chat: {e}")
            return CHAT_APOLOGY

    async def analyze_image(self, image_data: str) -> str:
        """Turn a base64 image (or data URL) into a text search query. Raises on failure."""
        if not self.is_available():
            raise RuntimeError("Image search is not available")

        media_type, payload = split_data_url(image_data, "image/jpeg")
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=200,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {"type": "base64", "media_type": media_type, "data": payload},
                        },
                        {"type": "text", "text": IMAGE_SEARCH_PROMPT},
                    ],
                }
            ],
        )
        text = response.content[0].text.strip() if response.content else ""
        if not text:
            raise ValueError("Empty image description")
        return text


# Singleton instance
anthropic_service = AnthropicService()
