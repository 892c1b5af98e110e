"""Property repository - Database operations for listings"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Favorite, Neighborhood, Property, SearchHistory, User
from .schemas import PropertySearchRequest


def _newest_first(query):
    return query.order_by(Property.created_at.desc(), Property.id.desc())


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PropertyRepository:
    """Repository for listing database operations"""

    @staticmethod
    def get_properties(db: Session, limit: int, offset: int = 0) -> list[Property]:
        return _newest_first(db.query(Property)).offset(offset).limit(limit).all()

    @staticmethod
    def get_featured_properties(db: Session, limit: int) -> list[Property]:
        """Premium listings, newest first"""
        return _newest_first(db.query(Property).filter(Property.is_premium.is_(True))).limit(limit).all()

    @staticmethod
    def get_property_by_id(db: Session, property_id: int) -> Optional[Property]:
        return db.query(Property).filter(Property.id == property_id).first()

    @staticmethod
    def get_properties_by_ids(db: Session, property_ids: list[int]) -> list[Property]:
        """Listings in the order the ids were given; unknown ids are skipped"""
        found = {p.id: p for p in db.query(Property).filter(Property.id.in_(property_ids)).all()}
        return [found[pid] for pid in property_ids if pid in found]

    @staticmethod
    def get_properties_by_owner(db: Session, owner_id: int) -> list[Property]:
        return _newest_first(db.query(Property).filter(Property.owner_id == owner_id)).all()

    @staticmethod
    def search_properties(
        db: Session, filters: PropertySearchRequest, limit: int, offset: int = 0
    ) -> list[Property]:
        query = db.query(Property)

        if filters.location:
            pattern = f"%{_escape_like(filters.location)}%"
            query = query.filter(
                or_(
                    Property.city.ilike(pattern, escape="\\"),
                    Property.state.ilike(pattern, escape="\\"),
                    Property.zip_code.ilike(pattern, escape="\\"),
                    Property.address.ilike(pattern, escape="\\"),
                )
            )
        if filters.property_type:
            query = query.filter(Property.property_type == filters.property_type)
        if filters.listing_type:
            query = query.filter(Property.listing_type == filters.listing_type)
        if filters.min_price is not None:
            query = query.filter(Property.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.filter(Property.price <= filters.max_price)
        if filters.beds is not None:
            query = query.filter(Property.bedrooms >= filters.beds)
        if filters.baths is not None:
            query = query.filter(Property.bathrooms >= filters.baths)
        if filters.min_sqft is not None:
            query = query.filter(Property.square_feet >= filters.min_sqft)
        if filters.max_sqft is not None:
            query = query.filter(Property.square_feet <= filters.max_sqft)
        if filters.min_year_built is not None:
            query = query.filter(Property.year_built >= filters.min_year_built)
        if filters.max_year_built is not None:
            query = query.filter(Property.year_built <= filters.max_year_built)

        query = _newest_first(query)
        if not filters.features:
            return query.offset(offset).limit(limit).all()

        # JSON feature lists are matched in Python so the query stays portable
        wanted = set(filters.features)
        results = [p for p in query.all() if wanted.issubset(set(p.features or []))]
        return results[offset : offset + limit]

    @staticmethod
    def get_comparable_properties(db: Session, prop: Property, limit: int = 5) -> list[Property]:
        """Same type and city, within one bedroom and 30% of the price"""
        return (
            _newest_first(
                db.query(Property).filter(
                    Property.id != prop.id,
                    Property.property_type == prop.property_type,
                    Property.city == prop.city,
                    Property.bedrooms.between(prop.bedrooms - 1, prop.bedrooms + 1),
                    Property.price.between(int(prop.price * 0.7), int(prop.price * 1.3)),
                )
            )
            .limit(limit)
            .all()
        )

    @staticmethod
    def create_property(db: Session, owner_id: int, **property_data) -> Property:
        prop = Property(owner_id=owner_id, **property_data)
        db.add(prop)
        db.commit()
        db.refresh(prop)
        return prop

    @staticmethod
    def update_property(db: Session, prop: Property, **updates) -> Property:
        for key, value in updates.items():
            if hasattr(prop, key):
                setattr(prop, key, value)
        db.commit()
        db.refresh(prop)
        return prop

    @staticmethod
    def delete_property(db: Session, prop: Property) -> None:
        db.delete(prop)
        db.commit()

    @staticmethod
    def get_neighborhood(db: Session, neighborhood_id: Optional[int]) -> Optional[Neighborhood]:
        if neighborhood_id is None:
            return None
        return db.query(Neighborhood).filter(Neighborhood.id == neighborhood_id).first()

    @staticmethod
    def get_favorited_properties(db: Session, user: User) -> list[Property]:
        return (
            db.query(Property)
            .join(Favorite, Favorite.property_id == Property.id)
            .filter(Favorite.user_id == user.id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
            .all()
        )

    @staticmethod
    def get_search_history(db: Session, user_id: int, limit: Optional[int] = None) -> list[SearchHistory]:
        """Newest first"""
        query = (
            db.query(SearchHistory)
            .filter(SearchHistory.user_id == user_id)
            .order_by(SearchHistory.created_at.desc(), SearchHistory.id.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def add_search_history(db: Session, user_id: int, search_params: dict) -> SearchHistory:
        entry = SearchHistory(user_id=user_id, search_params=search_params)
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry
