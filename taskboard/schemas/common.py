from typing import Generic, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope shared by every JSON endpoint."""
    success: bool = True
    data: T | None = None
    message: str | None = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class Page(BaseModel, Generic[T]):
    data: list[T]
    current_page: int
    per_page: int
    total: int
    last_page: int
