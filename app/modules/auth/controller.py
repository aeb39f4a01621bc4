from fastapi import APIRouter, status

from app.core.dependencies import (
    AuthServiceDep,
    CurrentUserDep,
    DatabaseDep,
    UserServiceDep,
)
from app.core.exceptions import UserNotFoundError
from app.core.responses import ApiResponse, success_response
from app.modules.users.dto import CreateUserDto, LoginDto, UpdateUserDto

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=ApiResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    user_data: CreateUserDto,
    db: DatabaseDep,
    user_service: UserServiceDep,
) -> ApiResponse:
    """Register a new user"""
    user = await user_service.create_user(db, user_data)
    return success_response("User registered successfully", {"user": user})


@router.post("/login", response_model=ApiResponse, response_model_exclude_none=True)
async def login(
    login_data: LoginDto,
    db: DatabaseDep,
    auth_service: AuthServiceDep,
) -> ApiResponse:
    """Check credentials and return a session token"""
    result = await auth_service.authenticate(db, login_data)
    return success_response("Login successful", {"user": result.user, "token": result.token})


@router.get("/profile", response_model=ApiResponse, response_model_exclude_none=True)
async def get_profile(
    current_user: CurrentUserDep,
    db: DatabaseDep,
    user_service: UserServiceDep,
) -> ApiResponse:
    """Profile of the authenticated user"""
    user = await user_service.get_user_by_id(db, current_user.user_id)
    if not user:
        raise UserNotFoundError(current_user.user_id)

    return success_response("Profile retrieved successfully", {"user": user})


@router.put("/profile", response_model=ApiResponse, response_model_exclude_none=True)
async def update_profile(
    update_data: UpdateUserDto,
    current_user: CurrentUserDep,
    db: DatabaseDep,
    user_service: UserServiceDep,
) -> ApiResponse:
    """Update the authenticated user's profile"""
    user = await user_service.update_user(db, current_user.user_id, update_data)
    return success_response("Profile updated successfully", {"user": user})
