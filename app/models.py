from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

USER_ROLES = ("user", "agent", "admin")
SUBSCRIPTION_TIERS = ("free", "premium", "enterprise")
PROPERTY_TYPES = ("house", "condo", "apartment", "townhouse", "land")
LISTING_TYPES = ("sale", "rent")
MESSAGE_STATUSES = ("unread", "read", "replied", "archived")
TOUR_STATUSES = ("pending", "confirmed", "completed", "cancelled", "rescheduled")
TOUR_TYPES = ("in-person", "virtual")
ID_VERIFICATION_STATUSES = ("none", "pending", "approved", "rejected")
ID_VERIFICATION_TYPES = ("drivers_license", "passport", "national_id", "realtor_license")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=True)  # bcrypt hash, null for Firebase-only accounts
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    firebase_uid = Column(String(255), unique=True, index=True, nullable=True)
    role = Column(String(20), default="user", nullable=False)  # user, agent, admin

    subscription_tier = Column(String(20), default="free", nullable=False)
    subscription_status = Column(String(50), default="none", nullable=True)  # none, active, canceled
    subscription_expires_at = Column(DateTime, nullable=True)

    profile_image = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)
    phone = Column(String(50), nullable=True)
    preferred_language = Column(String(10), default="en-GB", nullable=False)

    # Blue checkmark, granted by an admin
    is_verified = Column(Boolean, default=False, nullable=False)
    verification_date = Column(DateTime, nullable=True)
    verified_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    has_id_verification = Column(Boolean, default=False, nullable=False)
    id_verification_type = Column(String(50), nullable=True)
    id_verification_date = Column(DateTime, nullable=True)
    id_verification_status = Column(String(20), default="none", nullable=False)
    id_verification_notes = Column(Text, nullable=True)

    # WebAuthn credential (one per user)
    passkey = Column(String(512), nullable=True)  # credential id, base64url
    passkey_public_key = Column(Text, nullable=True)  # base64url COSE key
    passkey_counter = Column(Integer, default=0, nullable=False)
    passkey_enabled = Column(Boolean, default=False, nullable=False)
    challenge = Column(String(255), nullable=True)  # pending WebAuthn challenge, base64url

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    properties = relationship("Property", back_populates="owner")
    favorites = relationship("Favorite", back_populates="user", cascade="all, delete-orphan")
    search_history = relationship(
        "SearchHistory", back_populates="user", cascade="all, delete-orphan"
    )
    drafts = relationship("PropertyDraft", back_populates="user", cascade="all, delete-orphan")


class Neighborhood(Base):
    __tablename__ = "neighborhoods"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    zip_code = Column(String(20), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    overall_score = Column(Integer, nullable=False)  # 0-100
    rank = Column(Integer, nullable=True)

    # Insight metrics, 0-100
    safety_score = Column(Integer, nullable=True)
    school_score = Column(Integer, nullable=True)
    transit_score = Column(Integer, nullable=True)
    walkability_score = Column(Integer, nullable=True)
    restaurant_score = Column(Integer, nullable=True)
    shopping_score = Column(Integer, nullable=True)
    nightlife_score = Column(Integer, nullable=True)
    family_friendly_score = Column(Integer, nullable=True)
    affordability_score = Column(Integer, nullable=True)

    growth = Column(Float, nullable=True)  # annual growth rate
    median_home_price = Column(Integer, nullable=True)
    price_history = Column(JSON, nullable=True)  # [{year, price}]

    description = Column(Text, nullable=True)
    highlights = Column(JSON, nullable=True)
    challenges = Column(JSON, nullable=True)
    population = Column(Integer, nullable=True)
    demographics = Column(JSON, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    properties = relationship("Property", back_populates="neighborhood")


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Integer, nullable=False, index=True)
    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False, index=True)
    state = Column(String(100), nullable=False)
    zip_code = Column(String(20), nullable=False)
    country = Column(String(100), default="USA", nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    bedrooms = Column(Integer, nullable=False)
    bathrooms = Column(Float, nullable=False)
    square_feet = Column(Integer, nullable=False)
    property_type = Column(String(20), nullable=False)  # house, condo, apartment, townhouse, land
    year_built = Column(Integer, nullable=True)
    is_premium = Column(Boolean, default=False, nullable=False)
    features = Column(JSON, nullable=True)  # list of feature labels
    images = Column(JSON, nullable=True)  # list of image URLs
    lot_size = Column(Float, nullable=True)
    garage_spaces = Column(Integer, nullable=True)
    listing_type = Column(String(10), default="sale", nullable=False)  # sale, rent
    location_score = Column(Integer, nullable=True)
    neighborhood_id = Column(Integer, ForeignKey("neighborhoods.id"), nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="properties")
    neighborhood = relationship("Neighborhood", back_populates="properties")
    tours = relationship("PropertyTour", back_populates="property", cascade="all, delete-orphan")
    favorited_by = relationship("Favorite", back_populates="property", cascade="all, delete-orphan")


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "property_id", name="uq_favorite_user_property"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="favorites")
    property = relationship("Property", back_populates="favorited_by")


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="SET NULL"), nullable=True)
    subject = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    status = Column(String(20), default="unread", nullable=False)  # unread, read, replied, archived
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    sender = relationship("User", foreign_keys=[sender_id])
    recipient = relationship("User", foreign_keys=[recipient_id])


class SearchHistory(Base):
    __tablename__ = "search_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    search_params = Column(JSON, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="search_history")


class PropertyTour(Base):
    __tablename__ = "property_tours"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    agent_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    tour_date = Column(Date, nullable=False)
    tour_time = Column(String(5), nullable=False)  # HH:MM
    duration = Column(Integer, default=30, nullable=False)  # minutes
    notes = Column(Text, nullable=True)
    status = Column(String(20), default="pending", nullable=False)
    tour_type = Column(String(20), default="in-person", nullable=False)
    contact_phone = Column(String(50), nullable=True)
    contact_email = Column(String(255), nullable=True)
    additional_attendees = Column(Integer, default=0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    property = relationship("Property", back_populates="tours")
    user = relationship("User", foreign_keys=[user_id])
    agent = relationship("User", foreign_keys=[agent_id])


class PropertyDraft(Base):
    __tablename__ = "property_drafts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=True)
    form_data = Column(JSON, nullable=False)
    last_updated = Column(DateTime, server_default=func.now(), onupdate=func.now())
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="drafts")


class ChatAnalytics(Base):
    __tablename__ = "chat_analytics"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    message = Column(Text, nullable=False)
    response = Column(Text, nullable=False)
    property_id = Column(
        Integer, ForeignKey("properties.id", ondelete="SET NULL"), nullable=True, index=True
    )
    category = Column(String(100), nullable=True)
    sentiment = Column(String(50), nullable=True)
    is_property_specific = Column(Boolean, default=False, nullable=False)
    timestamp = Column(DateTime, server_default=func.now())


class SuggestedQuestion(Base):
    __tablename__ = "suggested_questions"

    id = Column(Integer, primary_key=True, index=True)
    question = Column(Text, nullable=False)
    category = Column(String(100), nullable=False)
    property_type = Column(String(20), nullable=True)
    is_general_question = Column(Boolean, default=True, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
    click_count = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
