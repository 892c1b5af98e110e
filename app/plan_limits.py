"""
Plan limits and utilities for subscription-based feature restrictions.
"""

from typing import Optional

from sqlalchemy.orm import Session

from .models import Favorite, User

# Favorite limits per tier (None means unlimited)
FAVORITE_LIMITS = {"free": 5, "premium": None, "enterprise": None}

SUBSCRIPTION_FEATURES = {
    "free": {
        "name": "Free",
        "price": 0,
        "features": [
            "Basic property search",
            "View property details",
            "Contact listing agents",
            "Save up to 5 favorite properties",
            "Limited AI search capabilities",
        ],
    },
    "premium": {
        "name": "Premium",
        "price": 19.99,
        "features": [
            "All Free features",
            "Advanced search filters",
            "Unlimited favorites",
            "Full AI assistant capabilities",
            "Neighborhood insights",
            "Property value predictions",
            "Personalized recommendations",
            "Market trend reports",
            "Bulk listing import",
        ],
    },
    "enterprise": {
        "name": "Enterprise",
        "price": 49.99,
        "features": [
            "All Premium features",
            "Market analytics dashboard",
            "Investment ROI calculator",
            "Property management tools",
            "Premium support",
            "API access",
            "Custom reports",
            "Team collaboration tools",
        ],
    },
}


def has_premium_access(user: User) -> bool:
    """Any paid tier unlocks premium routes"""
    return (user.subscription_tier or "free") != "free"


def get_favorite_limit(tier: Optional[str]) -> Optional[int]:
    """Get the favorites limit for a tier. Returns None for unlimited."""
    return FAVORITE_LIMITS.get((tier or "free").lower(), FAVORITE_LIMITS["free"])


def can_add_favorite(user: User, db: Session) -> tuple:
    """
    Check if user can save another favorite.
    Returns (can_add, error_message).
    """
    limit = get_favorite_limit(user.subscription_tier)
    if limit is None:
        return (True, None)

    current = db.query(Favorite).filter(Favorite.user_id == user.id).count()
    if current >= limit:
        return (
            False,
            f"You've reached the limit of {limit} favorite properties on the Free plan. "
            "Upgrade to Premium for unlimited favorites.",
        )
    return (True, None)
