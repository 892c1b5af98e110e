"""Tour service - Business logic for scheduling property tours"""

import logging
from datetime import date

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_tour_requested_notification
from ...models import Property, PropertyTour, User
from .repository import TourRepository
from .schemas import TourCreate, TourUpdate

logger = logging.getLogger(__name__)

FIRST_SLOT_MINUTES = 9 * 60
LAST_SLOT_MINUTES = 17 * 60 + 30
SLOT_INTERVAL_MINUTES = 30


def generate_tour_time_slots() -> list[str]:
    """Every half hour from 09:00 to 17:30"""
    return [
        f"{minutes // 60:02d}:{minutes % 60:02d}"
        for minutes in range(FIRST_SLOT_MINUTES, LAST_SLOT_MINUTES + 1, SLOT_INTERVAL_MINUTES)
    ]


def get_available_tour_time_slots(db: Session, property_id: int, tour_date: date) -> list[str]:
    """The day's slots minus those held by non-cancelled tours of the property"""
    booked = TourRepository.get_booked_times(db, property_id, tour_date)
    return [slot for slot in generate_tour_time_slots() if slot not in booked]


class TourService:
    """Service layer for tour business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TourRepository()

    def _get_property(self, property_id: int) -> Property:
        prop = self.db.query(Property).filter(Property.id == property_id).first()
        if not prop:
            raise HTTPException(status_code=404, detail="Property not found")
        return prop

    def _get_tour(self, tour_id: int) -> PropertyTour:
        tour = self.repo.get_tour_by_id(self.db, tour_id)
        if not tour:
            raise HTTPException(status_code=404, detail="Tour not found")
        return tour

    @staticmethod
    def _can_access(tour: PropertyTour, user: User) -> bool:
        return user.id in (tour.user_id, tour.agent_id) or user.role == "admin"

    def get_available_slots(self, property_id: int, tour_date: date) -> list[str]:
        return get_available_tour_time_slots(self.db, property_id, tour_date)

    def get_property_tours(self, property_id: int) -> list[PropertyTour]:
        return self.repo.get_tours_by_property(self.db, property_id)

    def get_user_tours(self, user: User) -> list[PropertyTour]:
        return self.repo.get_tours_by_user(self.db, user.id)

    def get_agent_tours(self, user: User) -> list[PropertyTour]:
        if user.role not in ("agent", "admin"):
            raise HTTPException(
                status_code=403, detail="Only agents and admins can access this endpoint"
            )
        return self.repo.get_tours_by_agent(self.db, user.id)

    def get_tour(self, tour_id: int, user: User) -> PropertyTour:
        tour = self._get_tour(tour_id)
        if not self._can_access(tour, user):
            raise HTTPException(status_code=403, detail="You don't have permission to view this tour")
        return tour

    async def create_tour(self, property_id: int, data: TourCreate, user: User) -> PropertyTour:
        prop = self._get_property(property_id)

        if data.tour_time not in self.get_available_slots(property_id, data.tour_date):
            logger.warning(
                f"⚠️ Slot {data.tour_date} {data.tour_time} unavailable for property {property_id}"
            )
            raise HTTPException(status_code=400, detail="The selected time slot is not available")

        tour = self.repo.create_tour(
            self.db,
            property_id=property_id,
            user_id=user.id,
            agent_id=prop.owner_id,
            status="pending",
            **data.model_dump(),
        )
        logger.info(f"✅ Tour {tour.id} booked for property {property_id} by user {user.id}")

        if prop.owner_id != user.id:
            await send_tour_requested_notification(prop.owner, user, prop, tour)
        return tour

    def update_tour(self, tour_id: int, data: TourUpdate, user: User) -> PropertyTour:
        tour = self._get_tour(tour_id)
        if not self._can_access(tour, user):
            raise HTTPException(
                status_code=403, detail="You don't have permission to update this tour"
            )

        updates = data.model_dump(exclude_unset=True)
        if data.tour_date and data.tour_time:
            is_current_slot = tour.tour_date == data.tour_date and tour.tour_time == data.tour_time
            available = self.get_available_slots(tour.property_id, data.tour_date)
            if not is_current_slot and data.tour_time not in available:
                raise HTTPException(
                    status_code=400, detail="The selected time slot is not available"
                )

        tour = self.repo.update_tour(self.db, tour, **updates)
        logger.info(f"✅ Tour {tour.id} updated by user {user.id}: {sorted(updates)}")
        return tour

    def cancel_tour(self, tour_id: int, user: User) -> PropertyTour:
        tour = self._get_tour(tour_id)
        if tour.status == "cancelled":
            raise HTTPException(status_code=400, detail="Tour is already cancelled")
        if not self._can_access(tour, user):
            raise HTTPException(
                status_code=403, detail="You don't have permission to cancel this tour"
            )

        tour = self.repo.update_tour(self.db, tour, status="cancelled")
        logger.info(f"🚫 Tour {tour.id} cancelled by user {user.id}")
        return tour
