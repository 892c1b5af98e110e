import base64
import json
import logging
import time
from typing import Optional

import httpx
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.x509 import load_pem_x509_certificate
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import FIREBASE_PROJECT_ID
from .database import get_db
from .models import User
from .plan_limits import has_premium_access
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

# auto_error=False so missing credentials surface as 401, not 403
security = HTTPBearer(auto_error=False)

GOOGLE_CERTS_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)

# Cache for Google's public keys
_cached_keys = None


def _b64url_decode(segment: str) -> bytes:
    padding_needed = 4 - len(segment) % 4
    if padding_needed != 4:
        segment += "=" * padding_needed
    return base64.urlsafe_b64decode(segment)


async def get_google_public_keys(force_refresh: bool = False) -> Optional[dict]:
    """Fetch Google's public keys for Firebase token verification"""
    global _cached_keys
    if _cached_keys and not force_refresh:
        logger.debug("✅ Using cached Google public keys")
        return _cached_keys

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(GOOGLE_CERTS_URL)
            if response.status_code == 200:
                _cached_keys = response.json()
                logger.info(f"✅ Fetched {len(_cached_keys)} Google public keys")
                return _cached_keys
            logger.error(f"❌ Failed to fetch Google public keys: HTTP {response.status_code}")
    except Exception as e:
        logger.error(f"❌ Error fetching Google public keys: {str(e)}")
    return None


async def verify_firebase_token(token: str) -> dict:
    """
    Verify a Firebase ID token with full signature verification.
    Uses Google's public certificates to check the RS256 signature, then
    validates audience, issuer and expiry claims.
    """
    if not FIREBASE_PROJECT_ID:
        logger.error("❌ FIREBASE_PROJECT_ID not configured")
        raise HTTPException(status_code=500, detail="Firebase not configured")

    try:
        parts = token.split(".")
        if len(parts) != 3:
            raise HTTPException(status_code=401, detail="Invalid token format")
        header_b64, payload_b64, signature_b64 = parts

        try:
            header = json.loads(_b64url_decode(header_b64))
        except Exception as e:
            logger.error(f"❌ Failed to decode token header: {str(e)}")
            raise HTTPException(status_code=401, detail="Invalid token header") from e

        kid = header.get("kid")
        if header.get("alg") != "RS256":
            logger.error(f"❌ Invalid token algorithm: {header.get('alg')}")
            raise HTTPException(status_code=401, detail="Invalid token algorithm")
        if not kid:
            raise HTTPException(status_code=401, detail="Token missing key ID")

        public_keys = await get_google_public_keys()
        if not public_keys or kid not in public_keys:
            logger.warning(f"⚠️ Key ID {kid} not found in public keys, refreshing")
            public_keys = await get_google_public_keys(force_refresh=True)
            if not public_keys or kid not in public_keys:
                raise HTTPException(status_code=401, detail="Unable to verify token signature")

        cert = load_pem_x509_certificate(public_keys[kid].encode(), default_backend())
        message = f"{header_b64}.{payload_b64}".encode()
        try:
            cert.public_key().verify(
                _b64url_decode(signature_b64), message, padding.PKCS1v15(), hashes.SHA256()
            )
        except Exception as e:
            logger.error(f"❌ Token signature verification failed: {str(e)}")
            raise HTTPException(status_code=401, detail="Invalid token signature") from e

        claims = json.loads(_b64url_decode(payload_b64))

        if claims.get("aud") != FIREBASE_PROJECT_ID:
            raise HTTPException(status_code=401, detail="Invalid token audience")
        if claims.get("iss") != f"https://securetoken.google.com/{FIREBASE_PROJECT_ID}":
            raise HTTPException(status_code=401, detail="Invalid token issuer")

        now = time.time()
        if claims.get("exp", 0) < now:
            raise HTTPException(
                status_code=401,
                detail="Token has expired. Please refresh your session.",
                headers={"X-Token-Expired": "true"},
            )
        # Allow 60 seconds clock skew
        if claims.get("iat", 0) > now + 60:
            logger.warning("⚠️ Token issued in the future")
            raise HTTPException(status_code=401, detail="Invalid token")

        logger.debug(f"✅ Firebase token verified for: {claims.get('email')}")
        return claims

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ Firebase token verification failed: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=401, detail="Token verification failed") from e


def _resolve_user(token: str, db: Session) -> Optional[User]:
    payload = verify_jwt_token(token)
    if not payload or payload.get("type") != "access":
        return None
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
    return db.query(User).filter(User.id == user_id).first()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from the bearer access token"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    user = _resolve_user(credentials.credentials, db)
    if not user:
        logger.warning("⚠️ Rejected invalid or expired access token")
        raise HTTPException(status_code=401, detail="Unauthorized")

    logger.debug(f"✅ User authenticated: {user.username}")
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Current user when a valid token is sent, otherwise None"""
    if not credentials:
        return None
    return _resolve_user(credentials.credentials, db)


async def require_premium(user: User = Depends(get_current_user)) -> User:
    """
    Get current user and verify they are on a paid tier.
    Use this dependency for premium-only routes.
    """
    if not has_premium_access(user):
        logger.warning(f"⚠️ User {user.username} attempted to access premium route on free tier")
        raise HTTPException(status_code=403, detail="Premium subscription required")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        logger.warning(f"🚫 Non-admin {user.username} attempted admin access")
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
