"""Billing domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...schemas import CamelModel


class SubscriptionRequest(BaseModel):
    """Schema for subscribing to or switching a plan"""

    plan: str

    @field_validator("plan")
    @classmethod
    def normalize_plan(cls, v: str) -> str:
        return (v or "").strip().lower()


class PlanResponse(BaseModel):
    id: str
    name: str
    price: float
    features: list[str]


class SubscriptionResponse(CamelModel):
    tier: str
    status: str
    expires_at: Optional[datetime] = None
    features: list[str]


class SubscriptionChangeResponse(BaseModel):
    message: str
    subscription: SubscriptionResponse
