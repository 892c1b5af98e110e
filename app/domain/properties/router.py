"""Property router - FastAPI endpoints for listings"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_optional_user, require_premium
from ...database import get_db
from ...models import User
from .schemas import (
    BulkUploadRequest,
    BulkUploadResponse,
    PersonalizedDescriptionResponse,
    PropertyCreate,
    PropertyResponse,
    PropertySearchRequest,
    PropertyUpdate,
    RecommendationResponse,
)
from .service import PropertyService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Properties"])


def get_property_service(db: Session = Depends(get_db)) -> PropertyService:
    """Dependency injection for PropertyService"""
    return PropertyService(db)


# ============================================================================
# LISTING
# ============================================================================


@router.get("/properties", response_model=list[PropertyResponse])
async def get_properties(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: PropertyService = Depends(get_property_service),
):
    """Newest listings first"""
    return service.get_properties(limit, offset)


@router.get("/properties/featured", response_model=list[PropertyResponse])
async def get_featured_properties(
    limit: int = Query(6, ge=1, le=50),
    service: PropertyService = Depends(get_property_service),
):
    return service.get_featured_properties(limit)


@router.get("/properties/compare/{ids}", response_model=list[PropertyResponse])
async def compare_properties(
    ids: str,
    service: PropertyService = Depends(get_property_service),
):
    """Up to four listings side by side, ids comma separated"""
    return service.compare_properties(ids)


# ============================================================================
# SEARCH & AI
# ============================================================================


@router.post("/properties/search", response_model=list[PropertyResponse])
async def search_properties(
    filters: PropertySearchRequest,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: Optional[User] = Depends(get_optional_user),
    service: PropertyService = Depends(get_property_service),
):
    return await service.search_properties(filters, limit, offset, current_user)


@router.get("/properties/recommended", response_model=list[RecommendationResponse])
async def get_recommended_properties(
    limit: int = Query(5, ge=1, le=20),
    location: Optional[str] = Query(None),
    propertyType: Optional[str] = Query(None),
    minPrice: Optional[int] = Query(None),
    maxPrice: Optional[int] = Query(None),
    beds: Optional[int] = Query(None),
    baths: Optional[float] = Query(None),
    current_user: User = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    """AI-ranked listings for the current user"""
    query_filters = {
        key: value
        for key, value in {
            "location": location,
            "propertyType": propertyType,
            "minPrice": minPrice,
            "maxPrice": maxPrice,
            "beds": beds,
            "baths": baths,
        }.items()
        if value is not None
    }
    return await service.get_recommendations(current_user, limit, query_filters)


@router.post("/properties/bulk-upload", response_model=BulkUploadResponse, status_code=201)
async def bulk_upload_properties(
    data: BulkUploadRequest,
    current_user: User = Depends(require_premium),
    service: PropertyService = Depends(get_property_service),
):
    return await service.bulk_upload(data.properties, current_user)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("/properties/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: int,
    service: PropertyService = Depends(get_property_service),
):
    return service.get_property(property_id)


@router.get(
    "/properties/{property_id}/personalized-description",
    response_model=PersonalizedDescriptionResponse,
)
async def get_personalized_description(
    property_id: int,
    current_user: User = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    description = await service.get_personalized_description(property_id, current_user)
    return PersonalizedDescriptionResponse(personalized_description=description)


@router.get("/properties/{property_id}/value-prediction")
async def get_value_prediction(
    property_id: int,
    years: int = Query(5),
    current_user: User = Depends(require_premium),
    service: PropertyService = Depends(get_property_service),
):
    return await service.predict_value(property_id, years)


@router.post("/properties", response_model=PropertyResponse, status_code=201)
async def create_property(
    data: PropertyCreate,
    current_user: User = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    return await service.create_property(data, current_user)


@router.put("/properties/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: int,
    data: PropertyUpdate,
    current_user: User = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    return await service.update_property(property_id, data, current_user)


@router.delete("/properties/{property_id}", status_code=204)
async def delete_property(
    property_id: int,
    current_user: User = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    service.delete_property(property_id, current_user)
    return Response(status_code=204)


@router.get("/user/properties", response_model=list[PropertyResponse])
async def get_user_properties(
    current_user: User = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    """Listings owned by the current user"""
    return service.get_user_properties(current_user)
