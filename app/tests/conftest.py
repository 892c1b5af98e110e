from __future__ import annotations

import os

# Configuration is read at import time, so the environment is fixed before the app loads
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SECURITY_HEADERS_ENABLED"] = "true"
for _key in (
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "PERPLEXITY_API_KEY",
    "RESEND_API_KEY",
    "FIREBASE_PROJECT_ID",
):
    os.environ[_key] = ""
os.environ.pop("REDIS_URL", None)
os.environ.pop("REDIS_HOST", None)

from typing import Callable  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app import rate_limiter  # noqa: E402
from app.database import Base, SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Property, User  # noqa: E402
from app.security_utils import create_access_token, hash_password_bcrypt  # noqa: E402
from app.services.notification_service import notification_hub  # noqa: E402

DEFAULT_PASSWORD = "s3cret-pass"


@pytest.fixture(autouse=True)
def _fresh_state():
    Base.metadata.create_all(bind=engine)
    rate_limiter.memory_cache.clear()
    notification_hub.clients.clear()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def make_user(db) -> Callable[..., User]:
    def _make(
        username: str = "buyer",
        role: str = "user",
        tier: str = "free",
        password: str | None = None,
        **fields,
    ) -> User:
        user = User(
            username=username,
            email=fields.pop("email", f"{username}@example.com"),
            password=hash_password_bcrypt(password) if password else None,
            role=role,
            subscription_tier=tier,
            subscription_status="active" if tier != "free" else "none",
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers() -> Callable[[User], dict]:
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


@pytest.fixture
def make_property(db) -> Callable[..., Property]:
    def _make(owner: User, **overrides) -> Property:
        values = {
            "title": "Bright family home",
            "description": "Three bedrooms close to the park",
            "price": 650000,
            "address": "12 Pine St",
            "city": "Seattle",
            "state": "WA",
            "zip_code": "98101",
            "bedrooms": 3,
            "bathrooms": 2.0,
            "square_feet": 1800,
            "property_type": "house",
            "listing_type": "sale",
            "features": ["garage", "garden"],
            "images": [],
        }
        values.update(overrides)
        prop = Property(owner_id=owner.id, **values)
        db.add(prop)
        db.commit()
        db.refresh(prop)
        return prop

    return _make


def property_payload(**overrides) -> dict:
    payload = {
        "title": "Lake view condo",
        "description": "Two bedroom condo with a balcony",
        "price": 480000,
        "address": "400 Lake Ave",
        "city": "Bellevue",
        "state": "WA",
        "zipCode": "98004",
        "bedrooms": 2,
        "bathrooms": 1.5,
        "squareFeet": 1100,
        "propertyType": "condo",
        "listingType": "sale",
        "features": ["balcony", "gym"],
    }
    payload.update(overrides)
    return payload
