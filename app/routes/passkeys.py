"""WebAuthn passkey registration and sign-in"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session
from webauthn import (
    generate_authentication_options,
    generate_registration_options,
    options_to_json,
    verify_authentication_response,
    verify_registration_response,
)
from webauthn.helpers import base64url_to_bytes, bytes_to_base64url
from webauthn.helpers.structs import (
    AuthenticatorSelectionCriteria,
    PublicKeyCredentialDescriptor,
    ResidentKeyRequirement,
    UserVerificationRequirement,
)

from ..auth import get_current_user
from ..config import WEBAUTHN_ORIGIN, WEBAUTHN_RP_ID, WEBAUTHN_RP_NAME
from ..database import get_db
from ..models import User
from ..schemas import UserResponse
from ..security_utils import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Passkeys"])


class PasskeyLoginOptionsRequest(BaseModel):
    username: str = ""


def _store_challenge(db: Session, user: User, challenge: bytes) -> None:
    user.challenge = bytes_to_base64url(challenge)
    db.commit()


# ============================================================================
# REGISTRATION
# ============================================================================


@router.get("/users/passkey/register-options")
async def passkey_register_options(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    exclude = []
    if current_user.passkey:
        exclude.append(PublicKeyCredentialDescriptor(id=base64url_to_bytes(current_user.passkey)))

    options = generate_registration_options(
        rp_id=WEBAUTHN_RP_ID,
        rp_name=WEBAUTHN_RP_NAME,
        user_id=str(current_user.id).encode(),
        user_name=current_user.username,
        user_display_name=current_user.full_name or current_user.username,
        exclude_credentials=exclude,
        authenticator_selection=AuthenticatorSelectionCriteria(
            resident_key=ResidentKeyRequirement.PREFERRED,
            user_verification=UserVerificationRequirement.PREFERRED,
        ),
    )
    _store_challenge(db, current_user, options.challenge)
    return json.loads(options_to_json(options))


@router.post("/users/passkey/register-verify")
async def passkey_register_verify(
    credential: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not current_user.challenge:
        raise HTTPException(status_code=400, detail="No registration in progress")

    try:
        verification = verify_registration_response(
            credential=credential,
            expected_challenge=base64url_to_bytes(current_user.challenge),
            expected_rp_id=WEBAUTHN_RP_ID,
            expected_origin=WEBAUTHN_ORIGIN,
        )
    except Exception as e:
        logger.warning(f"⚠️ Passkey registration failed for user {current_user.id}: {e}")
        raise HTTPException(status_code=400, detail="Passkey registration failed") from e

    current_user.passkey = bytes_to_base64url(verification.credential_id)
    current_user.passkey_public_key = bytes_to_base64url(verification.credential_public_key)
    current_user.passkey_counter = verification.sign_count
    current_user.passkey_enabled = True
    current_user.challenge = None
    db.commit()

    logger.info(f"✅ Passkey registered for user {current_user.id}")
    return {"message": "Passkey registered successfully", "passkeyEnabled": True}


@router.delete("/users/passkey")
async def delete_passkey(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    current_user.passkey = None
    current_user.passkey_public_key = None
    current_user.passkey_counter = 0
    current_user.passkey_enabled = False
    current_user.challenge = None
    db.commit()

    logger.info(f"🗑️ Passkey removed for user {current_user.id}")
    return {"message": "Passkey disabled successfully", "passkeyEnabled": False}


# ============================================================================
# SIGN-IN
# ============================================================================


@router.post("/auth/passkey/login-options")
async def passkey_login_options(data: PasskeyLoginOptionsRequest, db: Session = Depends(get_db)):
    if not data.username:
        raise HTTPException(status_code=400, detail="Username is required")

    user = db.query(User).filter(User.username == data.username).first()
    if not user or not user.passkey_enabled or not user.passkey:
        raise HTTPException(status_code=400, detail="Could not generate authentication options")

    options = generate_authentication_options(
        rp_id=WEBAUTHN_RP_ID,
        allow_credentials=[PublicKeyCredentialDescriptor(id=base64url_to_bytes(user.passkey))],
        user_verification=UserVerificationRequirement.PREFERRED,
    )
    _store_challenge(db, user, options.challenge)
    return json.loads(options_to_json(options))


@router.post("/auth/passkey/login-verify")
async def passkey_login_verify(
    body: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
):
    credential = dict(body)
    username = credential.pop("username", None)

    user = db.query(User).filter(User.username == username).first() if username else None
    if not user or not user.passkey_enabled or not user.passkey_public_key or not user.challenge:
        raise HTTPException(status_code=401, detail="Authentication failed")

    try:
        verification = verify_authentication_response(
            credential=credential,
            expected_challenge=base64url_to_bytes(user.challenge),
            expected_rp_id=WEBAUTHN_RP_ID,
            expected_origin=WEBAUTHN_ORIGIN,
            credential_public_key=base64url_to_bytes(user.passkey_public_key),
            credential_current_sign_count=user.passkey_counter or 0,
        )
    except Exception as e:
        logger.warning(f"⚠️ Passkey sign-in failed for {username}: {e}")
        raise HTTPException(status_code=401, detail="Authentication failed") from e

    user.passkey_counter = verification.new_sign_count
    user.challenge = None
    db.commit()
    db.refresh(user)

    logger.info(f"✅ Passkey sign-in for user {user.id}")
    return {
        "message": "Authentication successful",
        "user": UserResponse.model_validate(user).model_dump(by_alias=True, mode="json"),
        "token": create_access_token(user.id),
    }
