"""Property service - Business logic for listings, search and AI features"""

import logging
from typing import Optional

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ...cache import (
    FEATURED_PROPERTIES_TTL,
    build_featured_properties_key,
    cache,
    invalidate_featured_properties_cache,
)
from ...models import Property, User
from ...plan_limits import has_premium_access
from ...services.anthropic_service import anthropic_service
from ...services.market_data import build_value_market_context
from ...services.notification_service import NEW_PROPERTY, PROPERTY_UPDATED, notification_hub
from ...services.openai_service import openai_service
from .repository import PropertyRepository
from .schemas import (
    MAX_BULK_UPLOAD,
    PropertyCreate,
    PropertyResponse,
    PropertySearchRequest,
    PropertyUpdate,
)

logger = logging.getLogger(__name__)

MAX_COMPARE = 4
RECOMMENDATION_POOL_SIZE = 100


def _validation_message(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err.get("loc", []))
        parts.append(f"{field}: {err.get('msg')}" if field else err.get("msg", ""))
    return "; ".join(parts)


class PropertyService:
    """Service layer for listing business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PropertyRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_properties(self, limit: int, offset: int) -> list[Property]:
        return self.repo.get_properties(self.db, limit, offset)

    def get_featured_properties(self, limit: int) -> list[dict]:
        """Premium listings, served from Redis when cached"""
        cache_key = build_featured_properties_key(limit)
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

        properties = self.repo.get_featured_properties(self.db, limit)
        data = [
            PropertyResponse.model_validate(p).model_dump(by_alias=True, mode="json")
            for p in properties
        ]
        cache.set(cache_key, data, ttl=FEATURED_PROPERTIES_TTL)
        return data

    def get_property(self, property_id: int) -> Property:
        prop = self.repo.get_property_by_id(self.db, property_id)
        if not prop:
            raise HTTPException(status_code=404, detail="Property not found")
        return prop

    def compare_properties(self, ids: str) -> list[Property]:
        raw_ids = [part.strip() for part in ids.split(",") if part.strip()]
        if not raw_ids:
            raise HTTPException(status_code=400, detail="No property IDs provided")
        try:
            property_ids = [int(part) for part in raw_ids]
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid property IDs")
        if len(property_ids) > MAX_COMPARE:
            raise HTTPException(
                status_code=400,
                detail=f"You can compare up to {MAX_COMPARE} properties at a time",
            )
        return self.repo.get_properties_by_ids(self.db, property_ids)

    def get_user_properties(self, user: User) -> list[Property]:
        return self.repo.get_properties_by_owner(self.db, user.id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _ensure_can_modify(self, prop: Property, user: User) -> None:
        if prop.owner_id != user.id and user.role != "admin":
            logger.warning(f"🚫 User {user.id} tried to modify property {prop.id}")
            raise HTTPException(
                status_code=403, detail="You don't have permission to modify this property"
            )

    async def _broadcast(self, prop: Property, notification_type: str) -> None:
        try:
            await notification_hub.notify_property(prop, notification_type)
        except Exception as e:
            logger.error(f"❌ Failed to broadcast {notification_type} for property {prop.id}: {e}")

    async def create_property(self, data: PropertyCreate, user: User) -> Property:
        logger.info(f"📥 Creating property for user_id: {user.id}")
        prop = self.repo.create_property(self.db, user.id, **data.model_dump())
        invalidate_featured_properties_cache()
        logger.info(f"✅ Property {prop.id} created by user {user.id}")
        await self._broadcast(prop, NEW_PROPERTY)
        return prop

    async def update_property(self, property_id: int, data: PropertyUpdate, user: User) -> Property:
        prop = self.get_property(property_id)
        self._ensure_can_modify(prop, user)

        updates = data.model_dump(exclude_unset=True)
        prop = self.repo.update_property(self.db, prop, **updates)
        invalidate_featured_properties_cache()
        logger.info(f"✅ Property {prop.id} updated by user {user.id}: {sorted(updates)}")

        if "price" in updates or updates.get("is_premium") is True:
            await self._broadcast(prop, PROPERTY_UPDATED)
        return prop

    def delete_property(self, property_id: int, user: User) -> None:
        prop = self.get_property(property_id)
        self._ensure_can_modify(prop, user)
        self.repo.delete_property(self.db, prop)
        invalidate_featured_properties_cache()
        logger.info(f"🗑️ Property {property_id} deleted by user {user.id}")

    async def bulk_upload(self, items: list[dict], user: User) -> dict:
        if not items:
            raise HTTPException(status_code=400, detail="No properties provided")
        if len(items) > MAX_BULK_UPLOAD:
            raise HTTPException(
                status_code=400,
                detail=f"Maximum {MAX_BULK_UPLOAD} properties per upload",
            )

        created, errors = [], []
        for item in items:
            try:
                data = PropertyCreate.model_validate(item)
            except ValidationError as e:
                errors.append({"property": item, "error": _validation_message(e)})
                continue

            try:
                prop = self.repo.create_property(self.db, user.id, **data.model_dump())
            except Exception as e:
                self.db.rollback()
                logger.error(f"❌ Bulk upload item failed for user {user.id}: {e}")
                errors.append({"property": item, "error": "Failed to create property"})
                continue

            created.append(prop)
            await self._broadcast(prop, NEW_PROPERTY)

        if created:
            invalidate_featured_properties_cache()
        logger.info(
            f"✅ Bulk upload by user {user.id}: {len(created)} created, {len(errors)} failed"
        )
        return {
            "successful": len(created),
            "failed": len(errors),
            "errors": errors,
            "created": [{"id": p.id, "title": p.title} for p in created],
        }

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def _resolve_multimodal_query(self, filters: PropertySearchRequest) -> None:
        """Turn image or audio input into text and fold it into the filters"""
        if filters.search_type == "image" and filters.image_data:
            process = anthropic_service.analyze_image
            payload = filters.image_data
        elif filters.search_type == "audio" and filters.audio_data:
            process = openai_service.transcribe_audio
            payload = filters.audio_data
        else:
            return

        try:
            query = await process(payload)
        except Exception as e:
            logger.error(f"❌ Failed to process {filters.search_type} search input: {e}")
            raise HTTPException(
                status_code=400, detail=f"Failed to process {filters.search_type} data"
            ) from e

        logger.info(f"🔎 {filters.search_type} search resolved to: {query}")
        filters.multimodal_query = query
        if not filters.location:
            filters.location = query

    def _save_search(self, user: Optional[User], params: dict) -> None:
        """Best effort; a failed write never fails the search"""
        if user is None or not params:
            return
        try:
            self.repo.add_search_history(self.db, user.id, params)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to save search history for user {user.id}: {e}")

    async def search_properties(
        self,
        filters: PropertySearchRequest,
        limit: int,
        offset: int,
        user: Optional[User] = None,
    ) -> list[Property]:
        await self._resolve_multimodal_query(filters)
        results = self.repo.search_properties(self.db, filters, limit, offset)
        self._save_search(user, filters.history_params())
        return results

    # ------------------------------------------------------------------
    # AI features
    # ------------------------------------------------------------------

    async def get_recommendations(self, user: User, limit: int, query_filters: dict) -> list[dict]:
        if query_filters:
            self._save_search(user, query_filters)

        history = self.repo.get_search_history(self.db, user.id)
        search_params = [entry.search_params for entry in reversed(history)]
        favorites = self.repo.get_favorited_properties(self.db, user)
        candidates = self.repo.get_properties(self.db, RECOMMENDATION_POOL_SIZE)

        return await openai_service.generate_property_recommendations(
            user, candidates, search_params, favorites, limit
        )

    async def get_personalized_description(self, property_id: int, user: User) -> str:
        prop = self.get_property(property_id)
        if prop.is_premium and not has_premium_access(user):
            raise HTTPException(status_code=403, detail="Premium subscription required")
        return await openai_service.generate_personalized_description(prop, user)

    async def predict_value(self, property_id: int, years: int) -> dict:
        if years < 1 or years > 10:
            raise HTTPException(
                status_code=400, detail="Years parameter must be between 1 and 10"
            )
        prop = self.get_property(property_id)

        neighborhood = self.repo.get_neighborhood(self.db, prop.neighborhood_id)
        comparables = self.repo.get_comparable_properties(self.db, prop)
        market_data = build_value_market_context(prop, neighborhood, comparables)
        return await openai_service.predict_property_value_trends(prop, market_data, years)
