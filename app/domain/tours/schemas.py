"""Tour domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from ...models import TOUR_STATUSES, TOUR_TYPES
from ...schemas import CamelModel
from ...shared.validators import validate_email, validate_phone, validate_tour_time


class TourCreate(CamelModel):
    """Schema for requesting a property tour"""

    tour_date: date
    tour_time: str
    duration: int = Field(30, ge=15, le=120)
    notes: Optional[str] = None
    tour_type: str = "in-person"
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    additional_attendees: int = Field(0, ge=0, le=10)

    @field_validator("tour_time")
    @classmethod
    def validate_time(cls, v):
        return validate_tour_time(v)

    @field_validator("tour_type")
    @classmethod
    def validate_type(cls, v):
        if v not in TOUR_TYPES:
            raise ValueError(f"tourType must be one of: {', '.join(TOUR_TYPES)}")
        return v

    @field_validator("contact_phone")
    @classmethod
    def validate_contact_phone(cls, v):
        return validate_phone(v)

    @field_validator("contact_email")
    @classmethod
    def validate_contact_email(cls, v):
        return validate_email(v)


class TourUpdate(CamelModel):
    """Partial tour update"""

    tour_date: Optional[date] = None
    tour_time: Optional[str] = None
    duration: Optional[int] = Field(None, ge=15, le=120)
    notes: Optional[str] = None
    status: Optional[str] = None
    tour_type: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    additional_attendees: Optional[int] = Field(None, ge=0, le=10)

    @field_validator("tour_time")
    @classmethod
    def validate_time(cls, v):
        if v is None:
            return v
        return validate_tour_time(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in TOUR_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(TOUR_STATUSES)}")
        return v

    @field_validator("tour_type")
    @classmethod
    def validate_type(cls, v):
        if v is not None and v not in TOUR_TYPES:
            raise ValueError(f"tourType must be one of: {', '.join(TOUR_TYPES)}")
        return v

    @field_validator("contact_phone")
    @classmethod
    def validate_contact_phone(cls, v):
        return validate_phone(v)

    @field_validator("contact_email")
    @classmethod
    def validate_contact_email(cls, v):
        return validate_email(v)


class TourResponse(CamelModel):
    id: int
    property_id: int
    user_id: int
    agent_id: Optional[int] = None
    tour_date: date
    tour_time: str
    duration: int
    notes: Optional[str] = None
    status: str
    tour_type: str
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    additional_attendees: Optional[int] = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
