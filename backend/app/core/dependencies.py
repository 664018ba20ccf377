"""
Authentication dependencies for FastAPI.

This module provides the identity gate protecting routes that need a
verified caller.
"""

import logging
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from backend.app.core.exceptions import AuthenticationError, InsufficientPermissionsError
from backend.app.core.identity import IdentityProvider, IdentityVerificationError, get_identity_provider

logger = logging.getLogger(__name__)

# HTTP Bearer security scheme; missing headers are reported by get_current_principal
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> dict:
    """
    FastAPI dependency verifying the caller's bearer ID token.

    Checks:
    1. Authorization header is present and uses the Bearer scheme
    2. Token verifies against the identity provider

    Returns:
        Principal dict: {"email", "uid", "claims"}

    Raises:
        AuthenticationError: 401 if the header or token is missing
        InsufficientPermissionsError: 403 if verification fails
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    try:
        claims = identity_provider.verify_id_token(credentials.credentials)
    except IdentityVerificationError as exc:
        logger.info("ID token rejected: %s", exc)
        raise InsufficientPermissionsError()

    return {
        "email": claims["email"],
        "uid": claims.get("sub"),
        "claims": claims,
    }
