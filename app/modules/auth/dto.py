from pydantic import BaseModel, Field

from app.modules.users.dto import UserResponseDto


class LoginResponseDto(BaseModel):
    user: UserResponseDto = Field(..., description="Authenticated user's public profile")
    token: str = Field(..., description="Signed session token for the Authorization header")
