from __future__ import annotations

import asyncio
from datetime import datetime

from app.models import Property, User
from app.services.openai_service import (
    FALLBACK_RECOMMENDATION_REASON,
    NO_SEARCH_DATA_INSIGHT,
    OpenAIService,
    build_user_profile,
    fallback_value_prediction,
)


def _user() -> User:
    return User(id=1, username="buyer", subscription_tier="free", role="user")


def _listing(pid: int, **overrides) -> Property:
    values = {"id": pid, "title": f"Home {pid}", "price": 400000, "square_feet": 1000,
              "features": [], "is_premium": False}
    values.update(overrides)
    return Property(**values)


def test_recent_searches_weigh_double() -> None:
    # Oldest first: two old Tacoma searches lose to two recent Seattle ones
    history = [
        {"location": "Tacoma"},
        {"location": "Tacoma"},
        {"location": "Seattle"},
        {"location": "Bellevue"},
        {"location": "Seattle"},
        {"location": "Bellevue", "propertyType": "condo"},
        {"location": "Seattle", "beds": 3, "baths": 2.3},
    ]
    profile = build_user_profile(_user(), history, [])

    assert profile["preferences"]["locations"] == ["Seattle", "Bellevue", "Tacoma"]
    assert profile["preferences"]["propertyTypes"] == ["condo"]
    assert profile["preferences"]["bedrooms"] == 3
    assert profile["preferences"]["bathrooms"] == 2.5
    assert profile["activityInsights"]["searchHistoryCount"] == 7
    assert profile["activityInsights"]["lastSearch"]["location"] == "Seattle"


def test_profile_from_favorites() -> None:
    favorites = [
        _listing(1, features=["pool", "garage"], is_premium=True, price=500000, square_feet=1000),
        _listing(2, features=["pool"], is_premium=True, price=300000, square_feet=1000),
        _listing(3, features=["garden"]),
    ]
    profile = build_user_profile(_user(), [], favorites)

    assert profile["preferences"]["features"][0] == "pool"
    assert profile["preferences"]["premiumPreference"] == "premium"
    assert profile["preferences"]["avgPricePerSqFt"] == 400
    assert profile["preferences"]["locations"] is None
    assert profile["activityInsights"]["searchRecency"] == "inactive"


def test_fallback_value_prediction_compounds_four_percent() -> None:
    result = fallback_value_prediction(_listing(9, price=1000000), 2)

    assert [p["value"] for p in result["predictions"]] == [1040000, 1081600]
    assert result["predictions"][0]["year"] == datetime.utcnow().year + 1
    assert result["confidence"] == "low"
    assert result["currentValue"] == 1000000


def test_unconfigured_service_falls_back() -> None:
    service = OpenAIService()
    service.client = None
    candidates = [_listing(1), _listing(2), _listing(3)]

    recs = asyncio.run(service.generate_property_recommendations(_user(), candidates, [], [], 2))
    assert [r["property"].id for r in recs] == [1, 2]
    assert all(r["reason"] == FALLBACK_RECOMMENDATION_REASON for r in recs)

    assert asyncio.run(service.analyze_user_search_patterns(_user(), [])) == NO_SEARCH_DATA_INSIGHT
