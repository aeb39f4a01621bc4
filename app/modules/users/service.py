import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from typing import Optional

from app.core.exceptions import ConflictError, UserNotFoundError, ValidationError
from app.modules.auth.passwords import hash_password
from app.modules.users.dto import CreateUserDto, UpdateUserDto, UserResponseDto
from app.modules.users.models import User

logger = logging.getLogger(__name__)


class UsersService:
    def __init__(self):
        self.logger = logger

    async def create_user(self, db: AsyncSession, user_data: CreateUserDto) -> UserResponseDto:
        """Register a new user; the email must not be taken"""
        if await self.get_credentials_by_email(db, user_data.email):
            raise ConflictError(
                "User with this email already exists", message="Registration failed"
            )

        self.logger.info(f"Creating new user with email: {user_data.email}")

        new_user = User(
            email=user_data.email,
            password_hash=await hash_password(user_data.password),
            first_name=user_data.first_name,
            last_name=user_data.last_name,
        )

        db.add(new_user)
        try:
            await db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            await db.rollback()
            raise ConflictError(
                "User with this email already exists", message="Registration failed"
            )
        await db.refresh(new_user)

        return UserResponseDto.model_validate(new_user)

    async def get_user_by_id(self, db: AsyncSession, user_id: int) -> Optional[UserResponseDto]:
        """Get public profile by ID"""
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        return UserResponseDto.model_validate(user) if user else None

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[UserResponseDto]:
        """Get public profile by email"""
        user = await self.get_credentials_by_email(db, email)
        return UserResponseDto.model_validate(user) if user else None

    async def get_credentials_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        """Get the full row, password hash included. Authentication only."""
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def update_user(
        self, db: AsyncSession, user_id: int, update_data: UpdateUserDto
    ) -> UserResponseDto:
        """Update any subset of email, names and password"""
        update_dict = {
            key: value
            for key, value in update_data.model_dump(exclude_unset=True).items()
            if value
        }
        if not update_dict:
            raise ValidationError("No valid fields to update", message="Failed to update profile")

        if "email" in update_dict:
            result = await db.execute(
                select(User.id).where(User.email == update_dict["email"], User.id != user_id)
            )
            if result.scalar_one_or_none() is not None:
                raise ConflictError("Email already exists", message="Failed to update profile")

        if "password" in update_dict:
            update_dict["password_hash"] = await hash_password(update_dict.pop("password"))

        self.logger.info(f"Updating user {user_id} fields: {sorted(update_dict)}")

        try:
            result = await db.execute(
                update(User)
                .where(User.id == user_id)
                .values(**update_dict)
                .returning(User)
            )
            updated_user = result.scalar_one_or_none()
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("Email already exists", message="Failed to update profile")

        if not updated_user:
            raise UserNotFoundError(user_id)

        return UserResponseDto.model_validate(updated_user)
