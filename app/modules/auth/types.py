from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TokenFailure(str, Enum):
    """Why a presented token was rejected."""

    EXPIRED = "expired"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class AuthContext:
    """Identity decoded from a verified session token."""

    user_id: int
    email: str


@dataclass(frozen=True)
class TokenVerification:
    """Outcome of verifying an untrusted token: exactly one field is set."""

    identity: Optional[AuthContext] = None
    failure: Optional[TokenFailure] = None

    @property
    def ok(self) -> bool:
        return self.identity is not None
