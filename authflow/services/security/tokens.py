"""Access token inspection

Tokens are signed and verified by the API; the device only reads the `exp`
claim to decide whether a token is still usable.
"""
import logging
import time
from typing import Any, Dict, Optional

import jwt

logger = logging.getLogger(__name__)


def decode_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode a JWT payload without signature verification"""
    if not token:
        return None
    try:
        return jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    except jwt.PyJWTError as e:
        logger.warning(f"Could not decode token: {str(e)}")
        return None


def is_token_expired(token: Optional[str], buffer_seconds: int = 300) -> bool:
    """Expired, undecodable, without `exp`, or expiring within the buffer"""
    payload = decode_token(token)
    if not payload or not payload.get("exp"):
        return True
    try:
        expiry = int(payload["exp"])
    except (TypeError, ValueError):
        return True
    return expiry <= int(time.time()) + buffer_seconds
