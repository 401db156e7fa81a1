from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import ValidationError

from libs.auth.models import AuthUser
from libs.auth.tokens import decode_token
from libs.common.errors import UnauthorizedError
from libs.common.logging import get_logger

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> AuthUser:
    """
    Validate the bearer token and return the authenticated user.

    Identity is re-derived from the credential on every request.
    """
    if token is None or not token.credentials:
        raise UnauthorizedError("Unauthorized - No token provided")

    try:
        payload = decode_token(token.credentials)
        user = AuthUser(**payload)
    except (JWTError, ValidationError) as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise UnauthorizedError("Invalid or expired token")

    # Used by the rate limiter key function
    request.state.user = user
    return user
