import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from ..auth import get_current_user, verify_firebase_token
from ..database import get_db
from ..models import USER_ROLES, User
from ..rate_limiter import create_rate_limiter, get_client_ip
from ..schemas import AuthResponse, MessageResponse, UserResponse
from ..security_utils import (
    create_access_token,
    hash_password_bcrypt,
    log_security_event,
    verify_password_bcrypt,
)
from ..shared.validators import validate_email, validate_phone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Authentication"])

# 5 login attempts per 30 seconds per client IP
rate_limit_login = create_rate_limiter(limit=5, window_seconds=30, key_prefix="login")


class RegisterRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    email: str
    fullName: Optional[str] = None
    role: str = "user"

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        # Admins are never self-registered
        if v not in USER_ROLES or v == "admin":
            raise ValueError("role must be 'user' or 'agent'")
        return v


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class PreferencesUpdate(BaseModel):
    preferredLanguage: Optional[str] = None
    fullName: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    profileImage: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone_field(cls, v):
        return validate_phone(v)


class FirebaseAuthRequest(BaseModel):
    idToken: str


def issue_auth_response(user: User) -> AuthResponse:
    return AuthResponse(user=UserResponse.model_validate(user), token=create_access_token(user.id))


def _unique_username(db: Session, base: str) -> str:
    base = "".join(ch for ch in base if ch.isalnum() or ch in "._-")[:40] or "user"
    candidate = base
    while db.query(User).filter(User.username == candidate).first():
        candidate = f"{base}{secrets.randbelow(10000)}"
    return candidate


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(data: RegisterRequest, request: Request, db: Session = Depends(get_db)):
    if not data.username or not data.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    if db.query(User).filter(User.username == data.username).first():
        raise HTTPException(status_code=400, detail="Username already exists")
    if db.query(User).filter(User.email == data.email).first():
        raise HTTPException(status_code=400, detail="Email already exists")

    user = User(
        username=data.username,
        password=hash_password_bcrypt(data.password),
        email=data.email,
        full_name=data.fullName,
        role=data.role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"✅ Registered user {user.id} ({user.username})")
    log_security_event("register", str(user.id), get_client_ip(request))
    return issue_auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_login),
):
    if not data.username or not data.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    user = db.query(User).filter(User.username == data.username).first()
    if not user or not verify_password_bcrypt(data.password, user.password):
        log_security_event(
            "failed_login", None, get_client_ip(request), {"username": data.username}
        )
        raise HTTPException(status_code=401, detail="Invalid username or password")

    log_security_event("login", str(user.id), get_client_ip(request))
    return issue_auth_response(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy"""
    logger.info(f"👋 User {current_user.id} logged out")
    return MessageResponse(message="Logged out successfully")


@router.get("/user", response_model=UserResponse)
async def get_user(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/user/preferences", response_model=UserResponse)
async def update_preferences(
    data: PreferencesUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if data.preferredLanguage is not None:
        current_user.preferred_language = data.preferredLanguage
    if data.fullName is not None:
        current_user.full_name = data.fullName
    if data.bio is not None:
        current_user.bio = data.bio
    if data.phone is not None:
        current_user.phone = data.phone
    if data.profileImage is not None:
        current_user.profile_image = data.profileImage

    db.commit()
    db.refresh(current_user)
    return current_user


@router.post("/firebase-auth", response_model=AuthResponse)
async def firebase_auth(data: FirebaseAuthRequest, db: Session = Depends(get_db)):
    """Exchange a Firebase ID token for an API token, creating the account on first sign-in"""
    claims = await verify_firebase_token(data.idToken)
    firebase_uid = claims.get("user_id") or claims.get("sub")
    email = (claims.get("email") or "").lower()
    if not firebase_uid or not email:
        raise HTTPException(status_code=400, detail="Firebase token is missing uid or email")

    user = db.query(User).filter(User.firebase_uid == firebase_uid).first()
    if not user:
        user = db.query(User).filter(User.email == email).first()
        if user:
            user.firebase_uid = firebase_uid
            logger.info(f"🔗 Linked Firebase account to existing user {user.id}")
        else:
            user = User(
                username=_unique_username(db, email.split("@")[0]),
                email=email,
                full_name=claims.get("name"),
                profile_image=claims.get("picture"),
                firebase_uid=firebase_uid,
            )
            db.add(user)
            logger.info(f"✅ Created user from Firebase sign-in: {email}")
        db.commit()
        db.refresh(user)

    return issue_auth_response(user)
