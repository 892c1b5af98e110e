"""Tour router - FastAPI endpoints for property tours"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.validators import parse_iso_date
from .schemas import TourCreate, TourResponse, TourUpdate
from .service import TourService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Tours"])


def get_tour_service(db: Session = Depends(get_db)) -> TourService:
    """Dependency injection for TourService"""
    return TourService(db)


# ============================================================================
# AVAILABILITY
# ============================================================================


@router.get("/properties/{property_id}/tour-slots", response_model=list[str])
async def get_tour_slots(
    property_id: int,
    date: Optional[str] = Query(None),
    service: TourService = Depends(get_tour_service),
):
    """Open HH:MM slots for a property on a given day"""
    if not date:
        raise HTTPException(status_code=400, detail="Date parameter is required")
    try:
        tour_date = parse_iso_date(date)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format")
    return service.get_available_slots(property_id, tour_date)


# ============================================================================
# TOURS
# ============================================================================


@router.get("/properties/{property_id}/tours", response_model=list[TourResponse])
async def get_property_tours(
    property_id: int,
    current_user: User = Depends(get_current_user),
    service: TourService = Depends(get_tour_service),
):
    return service.get_property_tours(property_id)


@router.post("/properties/{property_id}/tours", response_model=TourResponse, status_code=201)
async def create_tour(
    property_id: int,
    data: TourCreate,
    current_user: User = Depends(get_current_user),
    service: TourService = Depends(get_tour_service),
):
    return await service.create_tour(property_id, data, current_user)


@router.get("/user/tours", response_model=list[TourResponse])
async def get_user_tours(
    current_user: User = Depends(get_current_user),
    service: TourService = Depends(get_tour_service),
):
    return service.get_user_tours(current_user)


@router.get("/agent/tours", response_model=list[TourResponse])
async def get_agent_tours(
    current_user: User = Depends(get_current_user),
    service: TourService = Depends(get_tour_service),
):
    """Tours on listings the current agent owns"""
    return service.get_agent_tours(current_user)


@router.get("/tours/{tour_id}", response_model=TourResponse)
async def get_tour(
    tour_id: int,
    current_user: User = Depends(get_current_user),
    service: TourService = Depends(get_tour_service),
):
    return service.get_tour(tour_id, current_user)


@router.put("/tours/{tour_id}", response_model=TourResponse)
async def update_tour(
    tour_id: int,
    data: TourUpdate,
    current_user: User = Depends(get_current_user),
    service: TourService = Depends(get_tour_service),
):
    return service.update_tour(tour_id, data, current_user)


@router.post("/tours/{tour_id}/cancel", response_model=TourResponse)
async def cancel_tour(
    tour_id: int,
    current_user: User = Depends(get_current_user),
    service: TourService = Depends(get_tour_service),
):
    return service.cancel_tour(tour_id, current_user)
