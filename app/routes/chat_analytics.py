"""Admin reporting over stored chat interactions"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import require_admin
from ..database import get_db
from ..models import ChatAnalytics, User
from ..schemas import CamelModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/chat-analytics", tags=["Chat Analytics"])


class ChatAnalyticsResponse(CamelModel):
    id: int
    user_id: Optional[int] = None
    message: str
    response: str
    property_id: Optional[int] = None
    category: Optional[str] = None
    sentiment: Optional[str] = None
    is_property_specific: bool
    timestamp: Optional[datetime] = None


def _newest_first(query):
    return query.order_by(ChatAnalytics.timestamp.desc(), ChatAnalytics.id.desc())


@router.get("", response_model=list[ChatAnalyticsResponse])
async def get_chat_analytics(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _newest_first(db.query(ChatAnalytics)).offset(offset).limit(limit).all()


@router.get("/top-questions")
async def get_top_questions(
    limit: int = Query(10, ge=1, le=100),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    count = func.count(ChatAnalytics.id)
    rows = (
        db.query(ChatAnalytics.message, count)
        .group_by(ChatAnalytics.message)
        .order_by(count.desc(), ChatAnalytics.message.asc())
        .limit(limit)
        .all()
    )
    return [{"message": message, "count": total} for message, total in rows]


@router.get("/categories")
async def get_category_breakdown(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    count = func.count(ChatAnalytics.id)
    rows = (
        db.query(ChatAnalytics.category, count)
        .group_by(ChatAnalytics.category)
        .order_by(count.desc())
        .all()
    )
    return [{"category": category or "uncategorized", "count": total} for category, total in rows]


@router.get("/sentiment")
async def get_sentiment_breakdown(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    count = func.count(ChatAnalytics.id)
    rows = (
        db.query(ChatAnalytics.sentiment, count)
        .group_by(ChatAnalytics.sentiment)
        .order_by(count.desc())
        .all()
    )
    return [{"sentiment": sentiment or "unknown", "count": total} for sentiment, total in rows]


@router.get("/by-property/{property_id}", response_model=list[ChatAnalyticsResponse])
async def get_analytics_by_property(
    property_id: int,
    limit: int = Query(20, ge=1, le=500),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(ChatAnalytics).filter(ChatAnalytics.property_id == property_id)
    return _newest_first(query).limit(limit).all()


@router.get("/by-user/{user_id}", response_model=list[ChatAnalyticsResponse])
async def get_analytics_by_user(
    user_id: int,
    limit: int = Query(20, ge=1, le=500),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(ChatAnalytics).filter(ChatAnalytics.user_id == user_id)
    return _newest_first(query).limit(limit).all()
