import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..domain.properties.repository import PropertyRepository
from ..models import User
from ..schemas import CamelModel
from ..services.openai_service import openai_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/search", tags=["Search History"])

# History entries fed to the insight prompt
INSIGHT_HISTORY_LIMIT = 20


class SearchHistoryCreate(BaseModel):
    searchParams: dict[str, Any]


class SearchHistoryResponse(CamelModel):
    id: int
    user_id: int
    search_params: dict[str, Any]
    created_at: Optional[datetime] = None


class SearchInsightsResponse(BaseModel):
    insights: str


@router.post("/history", response_model=SearchHistoryResponse, status_code=201)
async def add_search_history(
    data: SearchHistoryCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return PropertyRepository.add_search_history(db, current_user.id, data.searchParams)


@router.get("/history", response_model=list[SearchHistoryResponse])
async def get_search_history(
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return PropertyRepository.get_search_history(db, current_user.id, limit)


@router.get("/insights", response_model=SearchInsightsResponse)
async def get_search_insights(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """AI summary of what the user has been searching for"""
    history = PropertyRepository.get_search_history(db, current_user.id, INSIGHT_HISTORY_LIMIT)
    params = [entry.search_params for entry in reversed(history)]
    insights = await openai_service.analyze_user_search_patterns(current_user, params)
    return SearchInsightsResponse(insights=insights)
