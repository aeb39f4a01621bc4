import logging
from typing import Optional

from fastapi.security.utils import get_authorization_scheme_param

from app.core.exceptions import AuthenticationError, ForbiddenError
from app.modules.auth.token_service import TokenService
from app.modules.auth.types import AuthContext, TokenFailure

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    scheme, token = get_authorization_scheme_param(authorization)
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def authenticate(authorization: Optional[str], token_service: TokenService) -> AuthContext:
    """
    Resolve the caller's identity from the Authorization header.

    Missing token and expired token are 401s, any other verification
    failure is a 403. A missing signing secret surfaces as a 500 from
    the token service, never as an auth failure.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise AuthenticationError("Access token required", "No token provided")

    verification = token_service.verify(token)
    if verification.failure is TokenFailure.EXPIRED:
        raise AuthenticationError("Token expired", "Please login again")
    if not verification.ok:
        logger.warning("Rejected malformed or tampered token")
        raise ForbiddenError("Invalid token", "Token verification failed")

    return verification.identity
