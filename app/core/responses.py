from math import ceil
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    page: int = Field(..., description="Current page, 1-based")
    limit: int = Field(..., description="Page size")
    total: int = Field(..., description="Matching records before pagination")
    total_pages: int = Field(..., description="ceil(total / limit)")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=ceil(total / limit))


class ApiResponse(BaseModel):
    """Uniform envelope returned by every endpoint."""

    success: bool
    message: str
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    pagination: Optional[Pagination] = None


def success_response(
    message: str,
    data: Optional[Dict[str, Any]] = None,
    pagination: Optional[Pagination] = None,
) -> ApiResponse:
    return ApiResponse(success=True, message=message, data=data, pagination=pagination)


def error_content(message: str, error: Optional[str] = None) -> Dict[str, Any]:
    return ApiResponse(success=False, message=message, error=error).model_dump(
        exclude_none=True
    )
