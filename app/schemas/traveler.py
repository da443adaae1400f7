from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator
from datetime import datetime
from typing import Optional

from app.schemas.user import UserSummary

class TravelerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    password_confirmation: str
    is_admin: bool = False
    is_active: bool = True

    @field_validator("password_confirmation")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("The password confirmation does not match.")
        return value

class TravelerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=72)
    password_confirmation: Optional[str] = Field(None, validate_default=True)
    is_admin: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator("password_confirmation")
    @classmethod
    def passwords_match(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        password = info.data.get("password")
        if password is not None and value != password:
            raise ValueError("The password confirmation does not match.")
        return value

class TravelerResponse(BaseModel):
    id: int
    name: str
    is_active: bool
    user_id: int
    created_at: datetime
    updated_at: datetime
    user: UserSummary

    class Config:
        from_attributes = True
