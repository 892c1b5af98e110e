import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..domain.properties.schemas import PropertyResponse
from ..models import Favorite, Property, User
from ..plan_limits import can_add_favorite

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user/favorites", tags=["Favorites"])


class FavoriteCreate(BaseModel):
    propertyId: int


class FavoriteResponse(BaseModel):
    id: int
    userId: int
    propertyId: int


@router.get("", response_model=list[PropertyResponse])
async def get_favorites(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Favorited listings, most recently saved first"""
    return (
        db.query(Property)
        .join(Favorite, Favorite.property_id == Property.id)
        .filter(Favorite.user_id == current_user.id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        .all()
    )


@router.post("", response_model=FavoriteResponse, status_code=201)
async def add_favorite(
    data: FavoriteCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not db.query(Property).filter(Property.id == data.propertyId).first():
        raise HTTPException(status_code=404, detail="Property not found")

    existing = (
        db.query(Favorite)
        .filter(Favorite.user_id == current_user.id, Favorite.property_id == data.propertyId)
        .first()
    )
    if existing:
        raise HTTPException(status_code=409, detail="Property already in favorites")

    can_add, error_message = can_add_favorite(current_user, db)
    if not can_add:
        logger.warning(f"⚠️ User {current_user.id} reached favorite limit")
        raise HTTPException(status_code=403, detail=error_message)

    favorite = Favorite(user_id=current_user.id, property_id=data.propertyId)
    db.add(favorite)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Property already in favorites")
    db.refresh(favorite)

    logger.info(f"⭐ User {current_user.id} favorited property {data.propertyId}")
    return FavoriteResponse(
        id=favorite.id, userId=favorite.user_id, propertyId=favorite.property_id
    )


@router.delete("/{property_id}", status_code=204)
async def remove_favorite(
    property_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    favorite = (
        db.query(Favorite)
        .filter(Favorite.user_id == current_user.id, Favorite.property_id == property_id)
        .first()
    )
    if not favorite:
        raise HTTPException(status_code=404, detail="Favorite not found")

    db.delete(favorite)
    db.commit()
    return Response(status_code=204)
