"""
Authentication via Firebase ID tokens or API keys.

Routes depend on ``get_current_user`` / ``get_optional_user`` and never talk
to the identity provider directly, so tests swap them out through
``app.dependency_overrides``.
"""
import os
import jwt
from fastapi import HTTPException, Header
from typing import List, Optional
import logging

from reprover_api.config import settings

logger = logging.getLogger(__name__)

# Firebase ID tokens are RS256 JWTs signed by Google's secure token service
FIREBASE_JWKS_URL = (
    "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
)
FIREBASE_ISSUER_PREFIX = "https://securetoken.google.com/"

# Comma-separated service keys; "key:uid" acts for that uid
API_KEYS_ENV = "API_KEYS"
SERVICE_USER_ID = "admin"

_jwks_client = None


def get_jwks_client():
    """Get or create the JWKS client for Firebase ID token validation."""
    global _jwks_client
    if _jwks_client is None and settings.FIREBASE_PROJECT_ID:
        _jwks_client = jwt.PyJWKClient(FIREBASE_JWKS_URL)
    return _jwks_client


async def get_current_user(
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key")
) -> str:
    """
    Owner id for workout logs and saved workouts.

    The mobile and web clients send the signed-in user's Firebase ID token;
    service callers send X-API-Key, which is checked first.
    """
    if x_api_key:
        return validate_api_key(x_api_key)

    if authorization:
        return validate_id_token(authorization)

    raise HTTPException(
        status_code=401,
        detail="Missing authentication. Provide Authorization header or X-API-Key."
    )


def _configured_api_keys() -> List[str]:
    # Re-read on every request
    return [k.strip() for k in os.getenv(API_KEYS_ENV, "").split(",") if k.strip()]


def validate_api_key(api_key: str) -> str:
    """
    Map an X-API-Key header to the user whose logs and saved workouts it touches.

    Keys belong to trusted callers (import scripts, the admin console) rather
    than to people, so a key may name the user it acts for:
    - "sk_live_abc" -> SERVICE_USER_ID
    - "sk_live_abc:firebase-uid-42" -> "firebase-uid-42"
    """
    valid_keys = _configured_api_keys()
    if not valid_keys:
        logger.warning("X-API-Key sent but %s is empty", API_KEYS_ENV)
        raise HTTPException(status_code=401, detail="API key authentication not configured")

    key, _, acting_user = api_key.partition(":")
    if key not in valid_keys:
        raise HTTPException(status_code=401, detail="Invalid API key")

    return acting_user or SERVICE_USER_ID


def validate_id_token(authorization: str) -> str:
    """Validate a Firebase ID token and return its uid (the `sub` claim)."""
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    token = authorization.split(" ", 1)[1]
    jwks_client = get_jwks_client()

    if not jwks_client:
        raise HTTPException(
            status_code=500,
            detail="Token validation not configured (missing FIREBASE_PROJECT_ID)"
        )

    project_id = settings.FIREBASE_PROJECT_ID
    try:
        signing_key = jwks_client.get_signing_key_from_jwt(token)
        payload = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=project_id,
            issuer=f"{FIREBASE_ISSUER_PREFIX}{project_id}",
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.PyJWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid authentication token: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Token missing user ID")
    return user_id


async def get_optional_user(
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key")
) -> Optional[str]:
    """
    User id for endpoints that also serve signed-out clients (parsing, coaching).

    The id only tags LLM requests for usage tracking, so bad credentials
    degrade to an anonymous call instead of a 401.
    """
    if not authorization and not x_api_key:
        return None
    try:
        return await get_current_user(authorization, x_api_key)
    except HTTPException as e:
        logger.info("Treating request as anonymous: %s", e.detail)
        return None
