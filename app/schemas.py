from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire and snake_case in Python"""

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class UserResponse(CamelModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    role: str
    subscription_tier: str
    subscription_status: Optional[str] = None
    subscription_expires_at: Optional[datetime] = None
    profile_image: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    preferred_language: str = "en-GB"
    is_verified: bool = False
    id_verification_status: str = "none"
    passkey_enabled: bool = False
    created_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
    tokenType: str = "bearer"


class MessageResponse(BaseModel):
    message: str
