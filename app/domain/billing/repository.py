"""Billing repository - Database operations for subscriptions"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import User

_UNSET = object()


class BillingRepository:
    """Repository for billing database operations"""

    @staticmethod
    def update_user_subscription(
        db: Session,
        user: User,
        tier: Optional[str] = None,
        status: Optional[str] = None,
        expires_at=_UNSET,
    ) -> User:
        """Update user subscription fields; expires_at may be set to None explicitly"""
        if tier is not None:
            user.subscription_tier = tier
        if status is not None:
            user.subscription_status = status
        if expires_at is not _UNSET:
            user.subscription_expires_at = expires_at

        db.commit()
        db.refresh(user)
        return user
