"""Subscription service - Business logic for subscription management"""

import logging
from datetime import datetime, timedelta

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User
from ...plan_limits import SUBSCRIPTION_FEATURES
from .repository import BillingRepository

logger = logging.getLogger(__name__)

SUBSCRIPTION_PERIOD_DAYS = 30
PAID_TIERS = ("premium", "enterprise")


class SubscriptionService:
    """Service for subscription management"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BillingRepository()

    @staticmethod
    def get_plans() -> list[dict]:
        return [
            {"id": plan_id, "name": plan["name"], "price": plan["price"], "features": plan["features"]}
            for plan_id, plan in SUBSCRIPTION_FEATURES.items()
        ]

    @staticmethod
    def get_subscription(user: User) -> dict:
        """Current tier, status, expiry and feature list"""
        tier = user.subscription_tier or "free"
        status = user.subscription_status or "none"
        if tier == "free" and status == "active":
            status = "none"
        return {
            "tier": tier,
            "status": status,
            "expires_at": user.subscription_expires_at,
            "features": SUBSCRIPTION_FEATURES.get(tier, SUBSCRIPTION_FEATURES["free"])["features"],
        }

    @classmethod
    def get_user_subscription(cls, user: User) -> dict:
        """Profile view of the subscription; the free tier never carries a status or expiry"""
        view = cls.get_subscription(user)
        if view["tier"] == "free":
            view["status"] = "none"
            view["expires_at"] = None
        return view

    def subscribe(self, plan: str, user: User) -> dict:
        if plan not in PAID_TIERS:
            raise HTTPException(status_code=400, detail="Invalid subscription plan")
        if user.subscription_tier == plan:
            raise HTTPException(status_code=400, detail=f"You are already subscribed to {plan}")

        expires_at = datetime.utcnow() + timedelta(days=SUBSCRIPTION_PERIOD_DAYS)
        user = self.repo.update_user_subscription(
            self.db, user, tier=plan, status="active", expires_at=expires_at
        )
        logger.info(f"✅ User {user.id} subscribed to {plan} until {expires_at.date()}")
        return {
            "message": f"Successfully subscribed to {SUBSCRIPTION_FEATURES[plan]['name']}",
            "subscription": self.get_subscription(user),
        }

    def change_plan(self, plan: str, user: User) -> dict:
        if user.subscription_tier not in PAID_TIERS or user.subscription_status != "active":
            raise HTTPException(status_code=400, detail="No active subscription found")
        if plan not in PAID_TIERS:
            raise HTTPException(status_code=400, detail="Invalid subscription plan")
        if user.subscription_tier == plan:
            raise HTTPException(status_code=400, detail=f"You are already subscribed to {plan}")

        previous = user.subscription_tier
        user = self.repo.update_user_subscription(self.db, user, tier=plan)
        logger.info(f"✅ User {user.id} changed plan {previous} -> {plan}")
        return {
            "message": f"Subscription changed to {SUBSCRIPTION_FEATURES[plan]['name']}",
            "subscription": self.get_subscription(user),
        }

    def cancel_subscription(self, user: User) -> dict:
        if (user.subscription_tier or "free") == "free":
            raise HTTPException(status_code=400, detail="No active subscription found")

        previous = user.subscription_tier
        user = self.repo.update_user_subscription(
            self.db, user, tier="free", status="canceled", expires_at=None
        )
        logger.info(f"🚫 User {user.id} canceled {previous} subscription")
        return {
            "message": "Subscription canceled",
            "subscription": self.get_subscription(user),
        }
