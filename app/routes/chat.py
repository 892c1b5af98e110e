import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_optional_user
from ..database import get_db
from ..models import ChatAnalytics, Property, User
from ..services.anthropic_service import anthropic_service
from ..services.perplexity_service import perplexity_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Chat"])


class ChatTurn(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    message: Optional[str] = None
    chatHistory: list[ChatTurn] = []
    propertyId: Optional[int] = None
    category: Optional[str] = None


class ChatResponse(BaseModel):
    response: str
    apiSource: str


def record_chat_interaction(
    db: Session,
    user: Optional[User],
    message: str,
    reply: str,
    property_id: Optional[int],
    category: Optional[str],
) -> None:
    """Store the exchange for analytics; failures are logged only"""
    try:
        db.add(
            ChatAnalytics(
                user_id=user.id if user else None,
                message=message,
                response=reply,
                property_id=property_id,
                category=category,
                sentiment=None,
                is_property_specific=property_id is not None,
            )
        )
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to save chat analytics: {e}")


@router.post("/chat", response_model=ChatResponse)
async def chat(
    data: ChatRequest,
    response: Response,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not data.message or not data.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    property_context = None
    if data.propertyId is not None:
        property_context = db.query(Property).filter(Property.id == data.propertyId).first()

    history = [turn.model_dump() for turn in data.chatHistory]
    reply = None
    api_source = "anthropic"

    if perplexity_service.is_available():
        try:
            reply = await perplexity_service.handle_chat(data.message, history, property_context)
            api_source = "perplexity"
        except Exception as e:
            logger.warning(f"⚠️ Perplexity chat failed, falling back to Anthropic: {e}")

    if reply is None:
        reply = await anthropic_service.handle_chat_message(data.message, history, property_context)

    record_chat_interaction(
        db,
        current_user,
        data.message,
        reply,
        property_context.id if property_context else None,
        data.category,
    )

    response.headers["X-Api-Source"] = api_source
    return ChatResponse(response=reply, apiSource=api_source)
