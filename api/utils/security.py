"""
Verification of access tokens issued by the hosted auth service.

The service signs HS256 JWTs whose ``sub`` claim is the user UUID. This
API never issues or refreshes tokens.
"""
from typing import Any, Dict, Optional
import logging

import jwt

from config import settings

logger = logging.getLogger(__name__)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and verify an access token.

    Args:
        token: Encoded JWT from the Authorization header

    Returns:
        Decoded payload, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired access token")
        return None
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected invalid access token: {e}")
        return None
