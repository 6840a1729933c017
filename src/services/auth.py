"""Access token verification for API handlers.

Tokens are issued by the login endpoint as HS256 JWTs whose payload is
``{"user": {"_id": ..., "role": ..., "name": ...}, "exp": ...}``.
"""

from typing import Any, Mapping, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, Field, ValidationError

from src.utils.config import AuthConfig
from src.utils.errors import AuthenticationError, AuthorizationError
from src.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)


class AuthenticatedUser(BaseModel):
    """Identity carried by a verified access token."""
    id: str = Field(..., description="User ID")
    role: str = Field(..., description="admin or agent")
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == AuthConfig.ADMIN_ROLE


def extract_bearer_token(headers: Mapping[str, Any]) -> Optional[str]:
    """Pull the token out of an ``Authorization: Bearer`` header."""
    value = headers.get("Authorization") or headers.get("authorization") or ""
    scheme, _, token = value.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def verify_access_token(token: str) -> AuthenticatedUser:
    """Decode a token and return the user it was issued for."""
    secret = AuthConfig.get_jwt_secret()
    if not secret:
        raise AuthenticationError("JWT_SECRET not set")
    try:
        payload = jwt.decode(token, secret, algorithms=[AuthConfig.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning("Access token rejected", error=str(e))
        raise AuthenticationError() from e

    user = payload.get("user")
    if not isinstance(user, dict) or not user.get("_id") or not user.get("role"):
        raise AuthenticationError()
    try:
        return AuthenticatedUser(id=str(user["_id"]), role=user["role"], name=user.get("name"))
    except ValidationError as e:
        logger.warning("Access token has malformed user claim", error_count=e.error_count())
        raise AuthenticationError() from e


def authenticate_request(headers: Mapping[str, Any]) -> AuthenticatedUser:
    token = extract_bearer_token(headers)
    if token is None:
        raise AuthenticationError("No token, authorization denied")
    user = verify_access_token(token)
    logger.debug("Request authenticated", user_id=mask_user_id(user.id), role=user.role)
    return user


def require_admin(user: AuthenticatedUser) -> AuthenticatedUser:
    if not user.is_admin:
        logger.warning("Admin access denied", user_id=mask_user_id(user.id), role=user.role)
        raise AuthorizationError()
    return user
