"""
Identity provider integration.

Bearer credentials are ID tokens issued by an external identity provider.
This module verifies them and extracts the caller's email.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from backend.app.core.config import settings


class IdentityVerificationError(Exception):
    """Raised when an ID token cannot be verified."""


class IdentityProvider:
    """
    Verifies ID tokens with python-jose.

    The verification key and algorithm come from settings; audience and
    issuer are only checked when configured.
    """

    def __init__(
        self,
        key: str,
        algorithm: str,
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
    ):
        self.key = key
        self.algorithm = algorithm
        self.audience = audience
        self.issuer = issuer

    def verify_id_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate an ID token.

        Returns:
            Token claims; always includes a non-empty "email"

        Raises:
            IdentityVerificationError: bad signature, expired, wrong
                audience/issuer, or no email claim
        """
        options = {"verify_aud": bool(self.audience)}
        try:
            claims = jwt.decode(
                token,
                self.key,
                algorithms=[self.algorithm],
                audience=self.audience or None,
                issuer=self.issuer or None,
                options=options,
            )
        except JWTError as exc:
            raise IdentityVerificationError(str(exc)) from exc

        if not claims.get("email"):
            raise IdentityVerificationError("Token has no email claim")
        return claims


def create_id_token(
    email: str,
    uid: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Issue an ID token signed with the configured identity key.

    Used by local tooling and tests; production tokens come from the
    identity provider itself.

    Example payload:
        {
            "sub": "uid-123",
            "email": "user@example.com",
            "exp": 1234567890
        }
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.identity_token_expire_minutes)
    )
    to_encode = {"sub": uid or email, "email": email, "exp": expire}
    if settings.identity_audience:
        to_encode["aud"] = settings.identity_audience
    if settings.identity_issuer:
        to_encode["iss"] = settings.identity_issuer
    if extra_claims:
        to_encode.update(extra_claims)

    return jwt.encode(to_encode, settings.identity_secret_key, algorithm=settings.identity_algorithm)


def get_identity_provider() -> IdentityProvider:
    """FastAPI dependency returning the configured identity provider."""
    return IdentityProvider(
        key=settings.identity_secret_key,
        algorithm=settings.identity_algorithm,
        audience=settings.identity_audience,
        issuer=settings.identity_issuer,
    )
