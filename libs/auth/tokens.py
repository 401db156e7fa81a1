"""Bearer token encoding and verification (HS256 JWT)."""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import jwt

from libs.common.config import get_settings


def decode_token(token: str) -> dict[str, Any]:
    """Verify signature/expiry and return the claims. Raises ``JWTError``."""
    settings = get_settings()
    audience = settings.AUTH_JWT_AUDIENCE
    return jwt.decode(
        token,
        settings.AUTH_JWT_SECRET,
        algorithms=[settings.AUTH_JWT_ALGORITHM],
        audience=audience,
        options={"verify_aud": audience is not None},
    )


def create_access_token(
    subject: str,
    *,
    email: Optional[str] = None,
    name: Optional[str] = None,
    expires_in: timedelta = timedelta(hours=1),
    extra_claims: Optional[dict[str, Any]] = None,
) -> str:
    """Mint a signed token for ``subject``.

    The identity provider issues tokens in production; this is used by
    local tooling and tests.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    claims: dict[str, Any] = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
        "role": "authenticated",
    }
    if email:
        claims["email"] = email
    if name:
        claims["name"] = name
    if settings.AUTH_JWT_AUDIENCE:
        claims["aud"] = settings.AUTH_JWT_AUDIENCE
    if extra_claims:
        claims.update(extra_claims)
    return jwt.encode(
        claims, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM
    )
