import logging
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthenticationError
from app.modules.auth.dto import LoginResponseDto
from app.modules.auth.passwords import verify_password
from app.modules.auth.token_service import TokenService
from app.modules.users.dto import LoginDto, UserResponseDto
from app.modules.users.service import UsersService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    """Checks credentials and hands out session tokens."""

    def __init__(self, users_service: UsersService, token_service: TokenService):
        self.users_service = users_service
        self.token_service = token_service
        self.logger = logger

    async def authenticate(self, db: AsyncSession, login_data: LoginDto) -> LoginResponseDto:
        user = await self.users_service.get_credentials_by_email(db, login_data.email)

        # Same error for unknown email and wrong password
        if user is None or not await verify_password(login_data.password, user.password_hash):
            self.logger.info(f"Failed login attempt for {login_data.email}")
            raise AuthenticationError("Login failed", INVALID_CREDENTIALS)

        token = self.token_service.issue(user.id, user.email)
        self.logger.info(f"User {user.id} logged in")

        return LoginResponseDto(user=UserResponseDto.model_validate(user), token=token)
