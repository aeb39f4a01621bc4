import logging
from datetime import timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from app.core.exceptions import ConfigurationError
from app.modules.auth.types import AuthContext, TokenFailure, TokenVerification
from app.utils.datetime import parse_duration, utc_now

logger = logging.getLogger(__name__)


class TokenService:
    """Issues and verifies signed, time-bounded session tokens (JWT)."""

    def __init__(self, secret: str, expires_in: str = "7d", algorithm: str = "HS256"):
        self.secret = secret
        self.expires_in = expires_in
        self.algorithm = algorithm
        self.logger = logger

    def _require_secret(self) -> str:
        if not self.secret:
            self.logger.error("JWT_SECRET environment variable is not set")
            raise ConfigurationError("JWT configuration error")
        return self.secret

    def _lifetime(self) -> timedelta:
        try:
            return parse_duration(self.expires_in)
        except ValueError:
            self.logger.error(f"Invalid JWT_EXPIRES_IN value: {self.expires_in!r}")
            raise ConfigurationError("JWT configuration error")

    def issue(self, user_id: int, email: str, expires_in: Optional[timedelta] = None) -> str:
        """Sign a token carrying the user id and email."""
        secret = self._require_secret()
        issued_at = utc_now()
        lifetime = expires_in if expires_in is not None else self._lifetime()

        claims = {
            "sub": str(user_id),
            "email": email,
            "iat": issued_at,
            "exp": issued_at + lifetime,
        }
        return jwt.encode(claims, secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenVerification:
        """
        Verify an untrusted token.

        Never raises for bad input: expiry and every other verification
        failure come back as a typed ``TokenFailure``. A missing secret is a
        server fault and raises ``ConfigurationError``.
        """
        secret = self._require_secret()

        try:
            claims = jwt.decode(token, secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            return TokenVerification(failure=TokenFailure.EXPIRED)
        except (JWTError, ValueError, TypeError, AttributeError):
            return TokenVerification(failure=TokenFailure.MALFORMED)

        subject = claims.get("sub")
        email = claims.get("email")
        if not isinstance(subject, str) or not subject.isdigit() or not isinstance(email, str):
            return TokenVerification(failure=TokenFailure.MALFORMED)

        return TokenVerification(identity=AuthContext(user_id=int(subject), email=email))
