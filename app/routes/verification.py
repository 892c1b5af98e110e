"""
Identity Verification Routes
Users submit ID verification requests; admins review them and grant the
verified badge
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from ..auth import get_current_user, require_admin
from ..database import get_db
from ..models import ID_VERIFICATION_STATUSES, ID_VERIFICATION_TYPES, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Verification"])


class IdVerificationRequest(BaseModel):
    idVerificationType: str
    idVerificationDocument: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("idVerificationType")
    @classmethod
    def validate_type(cls, v):
        if v not in ID_VERIFICATION_TYPES:
            raise ValueError(f"idVerificationType must be one of: {', '.join(ID_VERIFICATION_TYPES)}")
        return v


class VerificationStatusUpdate(BaseModel):
    idVerificationStatus: str
    idVerificationNotes: Optional[str] = None
    isVerified: Optional[bool] = None

    @field_validator("idVerificationStatus")
    @classmethod
    def validate_status(cls, v):
        if v not in ID_VERIFICATION_STATUSES:
            raise ValueError(
                f"idVerificationStatus must be one of: {', '.join(ID_VERIFICATION_STATUSES)}"
            )
        return v


class VerifiedToggle(BaseModel):
    isVerified: bool
    notes: Optional[str] = None


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _set_badge(user: User, is_verified: bool, admin: User) -> None:
    user.is_verified = is_verified
    user.verification_date = datetime.utcnow() if is_verified else None
    user.verified_by = admin.id if is_verified else None


def _admin_user_view(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "isVerified": user.is_verified,
        "idVerificationStatus": user.id_verification_status,
    }


@router.post("/users/verify/id")
async def request_id_verification(
    data: IdVerificationRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    current_user.id_verification_type = data.idVerificationType
    current_user.id_verification_status = "pending"
    current_user.id_verification_notes = data.notes
    current_user.id_verification_date = datetime.utcnow()
    db.commit()

    logger.info(f"🪪 User {current_user.id} requested {data.idVerificationType} verification")
    return {
        "message": "ID verification request submitted successfully",
        "status": current_user.id_verification_status,
    }


@router.patch("/admin/users/{user_id}/verification")
async def update_verification_status(
    user_id: int,
    data: VerificationStatusUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = _get_user(db, user_id)
    user.id_verification_status = data.idVerificationStatus
    user.id_verification_notes = data.idVerificationNotes
    user.has_id_verification = data.idVerificationStatus == "approved"
    if data.isVerified is not None:
        _set_badge(user, data.isVerified, admin)
    db.commit()
    db.refresh(user)

    logger.info(f"✅ Admin {admin.id} set verification of user {user.id} to {data.idVerificationStatus}")
    return {
        "message": f"User verification {data.idVerificationStatus}",
        "user": _admin_user_view(user),
    }


@router.patch("/admin/users/{user_id}/verified")
async def toggle_verified_badge(
    user_id: int,
    data: VerifiedToggle,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = _get_user(db, user_id)
    _set_badge(user, data.isVerified, admin)
    db.commit()
    db.refresh(user)

    return {
        "message": f"User {'verified' if data.isVerified else 'unverified'} successfully",
        "user": _admin_user_view(user),
    }


@router.get("/verified-users")
async def get_verified_users(db: Session = Depends(get_db)):
    users = db.query(User).filter(User.is_verified.is_(True)).order_by(User.id.asc()).all()
    return [
        {
            "id": u.id,
            "username": u.username,
            "fullName": u.full_name,
            "isVerified": u.is_verified,
            "role": u.role,
        }
        for u in users
    ]


@router.get("/admin/verification-requests")
async def get_verification_requests(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    users = (
        db.query(User)
        .filter(User.id_verification_status == "pending")
        .order_by(User.id_verification_date.asc(), User.id.asc())
        .all()
    )
    return [
        {
            **_admin_user_view(u),
            "fullName": u.full_name,
            "idVerificationType": u.id_verification_type,
            "idVerificationDate": u.id_verification_date,
            "idVerificationNotes": u.id_verification_notes,
        }
        for u in users
    ]
