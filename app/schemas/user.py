"""
User and authentication Pydantic schemas
"""

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator
from datetime import datetime

class UserSummary(BaseModel):
    id: int
    name: str
    email: str
    is_admin: bool

    class Config:
        from_attributes = True

class UserResponse(UserSummary):
    created_at: datetime
    updated_at: datetime
    unread_notifications_count: int = 0

class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72, description="Password must be between 8-72 characters")
    password_confirmation: str

    @field_validator("password_confirmation")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("The password confirmation does not match.")
        return value

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    user: UserSummary
    access_token: str
    token_type: str = "Bearer"
    expires_in: int

class CurrentUserResponse(BaseModel):
    user: UserResponse
