"""Tour repository - Database operations for property tours"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import PropertyTour


def _upcoming_first(query):
    return query.order_by(PropertyTour.tour_date.asc(), PropertyTour.tour_time.asc(), PropertyTour.id.asc())


class TourRepository:
    """Repository for tour database operations"""

    @staticmethod
    def get_tour_by_id(db: Session, tour_id: int) -> Optional[PropertyTour]:
        return db.query(PropertyTour).filter(PropertyTour.id == tour_id).first()

    @staticmethod
    def get_tours_by_property(db: Session, property_id: int) -> list[PropertyTour]:
        return _upcoming_first(db.query(PropertyTour).filter(PropertyTour.property_id == property_id)).all()

    @staticmethod
    def get_tours_by_user(db: Session, user_id: int) -> list[PropertyTour]:
        return _upcoming_first(db.query(PropertyTour).filter(PropertyTour.user_id == user_id)).all()

    @staticmethod
    def get_tours_by_agent(db: Session, agent_id: int) -> list[PropertyTour]:
        return _upcoming_first(db.query(PropertyTour).filter(PropertyTour.agent_id == agent_id)).all()

    @staticmethod
    def get_booked_times(db: Session, property_id: int, tour_date: date) -> set[str]:
        """Times held by non-cancelled tours of a property on one day"""
        rows = (
            db.query(PropertyTour.tour_time)
            .filter(
                PropertyTour.property_id == property_id,
                PropertyTour.tour_date == tour_date,
                PropertyTour.status != "cancelled",
            )
            .all()
        )
        return {row[0] for row in rows}

    @staticmethod
    def create_tour(db: Session, **tour_data) -> PropertyTour:
        tour = PropertyTour(**tour_data)
        db.add(tour)
        db.commit()
        db.refresh(tour)
        return tour

    @staticmethod
    def update_tour(db: Session, tour: PropertyTour, **updates) -> PropertyTour:
        for key, value in updates.items():
            if hasattr(tour, key):
                setattr(tour, key, value)
        db.commit()
        db.refresh(tour)
        return tour
