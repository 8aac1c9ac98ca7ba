from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator
from taskboard.utils.sanitization import sanitize_string


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr

    @field_validator("name", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)


class UserCreate(UserBase):
    password: str = Field(..., min_length=8)


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    user_id: int | None = None


class UserResponse(UserBase):
    id: int
    created_at: datetime | None = None

    class Config:
        from_attributes = True
