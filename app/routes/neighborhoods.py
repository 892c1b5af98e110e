import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..cache import NEIGHBORHOODS_TTL, build_neighborhoods_key, cache
from ..database import get_db
from ..models import Neighborhood
from ..schemas import CamelModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/neighborhoods", tags=["Neighborhoods"])


class NeighborhoodResponse(CamelModel):
    id: int
    name: str
    city: str
    state: str
    zip_code: str
    latitude: float
    longitude: float
    overall_score: int
    rank: Optional[int] = None
    safety_score: Optional[int] = None
    school_score: Optional[int] = None
    transit_score: Optional[int] = None
    walkability_score: Optional[int] = None
    restaurant_score: Optional[int] = None
    shopping_score: Optional[int] = None
    nightlife_score: Optional[int] = None
    family_friendly_score: Optional[int] = None
    affordability_score: Optional[int] = None
    growth: Optional[float] = None
    median_home_price: Optional[int] = None
    price_history: Optional[Any] = None
    description: Optional[str] = None
    highlights: Optional[Any] = None
    challenges: Optional[Any] = None
    population: Optional[int] = None
    demographics: Optional[Any] = None
    created_at: Optional[datetime] = None


@router.get("", response_model=list[NeighborhoodResponse])
async def get_neighborhoods(
    limit: int = Query(5, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Top-ranked neighborhoods, cached in Redis when available"""
    cache_key = build_neighborhoods_key(limit)
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    neighborhoods = (
        db.query(Neighborhood)
        .order_by(Neighborhood.rank.is_(None), Neighborhood.rank.asc(), Neighborhood.id.asc())
        .limit(limit)
        .all()
    )
    data = [
        NeighborhoodResponse.model_validate(n).model_dump(by_alias=True, mode="json")
        for n in neighborhoods
    ]
    cache.set(cache_key, data, ttl=NEIGHBORHOODS_TTL)
    return data


@router.get("/{neighborhood_id}", response_model=NeighborhoodResponse)
async def get_neighborhood(neighborhood_id: int, db: Session = Depends(get_db)):
    neighborhood = db.query(Neighborhood).filter(Neighborhood.id == neighborhood_id).first()
    if not neighborhood:
        raise HTTPException(status_code=404, detail="Neighborhood not found")
    return neighborhood
