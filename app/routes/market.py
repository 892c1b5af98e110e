import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth import require_premium
from ..models import User
from ..services.market_data import generate_market_trends

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/market", tags=["Market"])


@router.get("/trends")
async def get_market_trends(
    location: Optional[str] = Query(None),
    current_user: User = Depends(require_premium),
):
    """Market report for a city: headline figures, trends and a forecast"""
    if not location or not location.strip():
        raise HTTPException(status_code=400, detail="Location is required")
    return generate_market_trends(location.strip())
