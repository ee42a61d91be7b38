"""
API key authentication for the VideoCapsule API.

Keys come from the comma-separated API_KEYS setting and are sent either
as an X-API-Key header or as a Bearer token. With DEV_MODE on and no
keys configured, every request is let through.
"""

import hmac
from typing import Optional

from fastapi import HTTPException, Header, Depends

from backend.config import config

DEV_PRINCIPAL = "dev"


def get_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    authorization: Optional[str] = Header(None)
) -> Optional[str]:
    """The key from X-API-Key, falling back to an Authorization Bearer token."""
    if x_api_key:
        return x_api_key.strip()

    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()

    return None


def _is_known_key(api_key: str) -> bool:
    return any(hmac.compare_digest(api_key.encode(), known.encode()) for known in config.api_keys_list)


async def verify_api_key(api_key: Optional[str] = Depends(get_api_key)) -> str:
    """
    Reject requests without a valid key: 401 when none is sent, 403 when
    it is unknown. Returns the key, or DEV_PRINCIPAL when auth is off.
    """
    if not config.auth_required:
        return DEV_PRINCIPAL

    if api_key is None:
        raise HTTPException(
            status_code=401,
            detail="API key required. Provide X-API-Key header or Bearer token.",
            headers={"WWW-Authenticate": "Bearer"}
        )

    if not _is_known_key(api_key):
        raise HTTPException(status_code=403, detail="Invalid API key")

    return api_key


# Router-level dependency
require_auth = Depends(verify_api_key)
