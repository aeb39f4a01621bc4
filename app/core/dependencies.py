"""
Centralized dependency management
Singletons for stateless services, per-request for DB sessions and identity
"""

from functools import lru_cache
from typing import AsyncGenerator, Annotated, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Depends, Header, Request


from app.core.config import config
from app.core.db.engine import get_db_util
from app.modules.auth.gate import authenticate
from app.modules.auth.service import AuthService
from app.modules.auth.token_service import TokenService
from app.modules.auth.types import AuthContext
from app.modules.expenses.service import ExpensesService
from app.modules.users.service import UsersService


# ============================================================================
# PER-REQUEST DEPENDENCIES (New instance per request)
# ============================================================================


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database session - NEW per request
    Automatically commits/rollbacks and closes
    """
    async for session in get_db_util():
        yield session


# ============================================================================
# SERVICE LAYER (Singletons that accept DB session)
# ============================================================================


@lru_cache()
def get_token_service():
    """Token service - SINGLETON, configured once from settings"""
    return TokenService(
        secret=config.jwt_secret,
        expires_in=config.jwt_expires_in,
        algorithm=config.jwt_algorithm,
    )


@lru_cache()
def get_user_service():
    """User service - SINGLETON"""
    return UsersService()


@lru_cache()
def get_auth_service():
    """Auth service - SINGLETON"""
    return AuthService(
        users_service=get_user_service(),
        token_service=get_token_service(),
    )


@lru_cache()
def get_expense_service():
    """
    Expense service - SINGLETON
    Takes DB session as method parameter, not in constructor
    """
    return ExpensesService()


# ============================================================================
# AUTHENTICATION GATE (Per request)
# ============================================================================


def get_current_user(
    request: Request,
    token_service: Annotated[TokenService, Depends(get_token_service)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> AuthContext:
    """Verify the bearer token and attach the identity to request.state"""
    identity = authenticate(authorization, token_service)
    request.state.user = identity
    return identity


# ============================================================================
# FASTAPI DEPENDENCY TYPE ALIASES
# ============================================================================

# Database dependencies
DatabaseDep = Annotated[AsyncSession, Depends(get_db)]

# Service dependencies
UserServiceDep = Annotated[UsersService, Depends(get_user_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
ExpenseServiceDep = Annotated[ExpensesService, Depends(get_expense_service)]

# Identity
CurrentUserDep = Annotated[AuthContext, Depends(get_current_user)]
