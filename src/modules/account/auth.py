"""JWT authentication dependency for FastAPI.

Validates Bearer tokens from the Authorization header and resolves the
account every billing read and write is scoped to.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from src.config import settings
from src.exceptions import UnauthorizedException

logger = logging.getLogger(__name__)

# Bearer token from the Authorization header; missing tokens are handled below
_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    """The caller resolved from a JWT; ``account_id`` owns their billings."""

    account_id: str
    email: str | None = None


def _decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises UnauthorizedException on failure."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        logger.warning("JWT validation failed: %s", exc)
        raise UnauthorizedException("Invalid or expired token") from exc


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> AuthenticatedUser:
    """FastAPI dependency that extracts and validates the current user from JWT."""
    if credentials is None:
        raise UnauthorizedException("Authentication required")

    payload = _decode_token(credentials.credentials)

    account_id = payload.get("sub")
    if not account_id:
        raise UnauthorizedException("Token is missing required claims")

    user = AuthenticatedUser(account_id=str(account_id), email=payload.get("email"))
    request.state.user = user
    return user
