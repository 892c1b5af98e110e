"""Billing router - FastAPI endpoints for subscription management"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    PlanResponse,
    SubscriptionChangeResponse,
    SubscriptionRequest,
    SubscriptionResponse,
)
from .subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Billing"])


def get_subscription_service(db: Session = Depends(get_db)) -> SubscriptionService:
    """Dependency injection for SubscriptionService"""
    return SubscriptionService(db)


# ============================================================================
# PLANS
# ============================================================================


@router.get("/subscription/plans", response_model=list[PlanResponse])
async def get_plans():
    return SubscriptionService.get_plans()


# ============================================================================
# SUBSCRIPTION MANAGEMENT
# ============================================================================


@router.get("/subscription", response_model=SubscriptionResponse)
async def get_subscription(user: User = Depends(get_current_user)):
    """Get current plan information"""
    return SubscriptionService.get_subscription(user)


@router.get("/user/subscription", response_model=SubscriptionResponse)
async def get_user_subscription(user: User = Depends(get_current_user)):
    return SubscriptionService.get_user_subscription(user)


@router.post("/subscription", response_model=SubscriptionChangeResponse)
async def subscribe(
    body: SubscriptionRequest,
    user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Start a paid plan"""
    return service.subscribe(body.plan, user)


@router.put("/subscription", response_model=SubscriptionChangeResponse)
async def change_subscription_plan(
    body: SubscriptionRequest,
    user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Switch between paid plans"""
    return service.change_plan(body.plan, user)


@router.delete("/subscription", response_model=SubscriptionChangeResponse)
async def cancel_subscription(
    user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Cancel subscription and return to the free plan"""
    return service.cancel_subscription(user)
