"""
Pydantic schemas for authentication endpoints.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from wagehire.schemas.user import UserResponse, validate_optional_url


def _check_password_bytes(v: str) -> str:
    # bcrypt hard limit
    if len(v.encode("utf-8")) > 72:
        raise ValueError("Password too long (bcrypt limit 72 bytes)")
    return v


class RegisterRequest(BaseModel):
    """Request schema for registration. Any submitted role is ignored."""
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, description="Password (min 8 characters, mixed case, digit, special)")
    name: str = Field(..., min_length=2, max_length=200, description="User's full name")
    phone: Optional[str] = Field(default=None, max_length=50)
    resume_url: Optional[str] = Field(default=None, description="Link to the candidate's resume")
    current_position: Optional[str] = Field(default=None, max_length=200)
    experience_years: Optional[int] = Field(default=None, ge=0, le=50, description="Experience years must be a number between 0 and 50")
    skills: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        return _check_password_bytes(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator("resume_url")
    @classmethod
    def validate_resume_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_url(v)

    class Config:
        json_schema_extra = {
            "example": {
                "email": "jane.doe@example.com",
                "password": "Str0ng!Pass",
                "name": "Jane Doe",
                "current_position": "Backend Engineer",
                "experience_years": 4
            }
        }


class LoginRequest(BaseModel):
    """Request schema for login."""
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")

    class Config:
        json_schema_extra = {
            "example": {
                "email": "jane.doe@example.com",
                "password": "Str0ng!Pass"
            }
        }


class EmailRequest(BaseModel):
    """Body for resend-verification and forgot-password."""
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        return _check_password_bytes(v)


class LoginResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserResponse


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse
    is_admin: bool
    email_verification_sent: bool
    requires_verification: bool
    verification_url: Optional[str] = Field(None, description="Manual verification link, returned when the email was not delivered")


class VerificationDispatchResponse(BaseModel):
    message: str
    email_sent: bool
    verification_url: Optional[str] = None


class PasswordResetDispatchResponse(BaseModel):
    message: str
    email_sent: bool
    reset_url: Optional[str] = None


class ManualVerificationResponse(BaseModel):
    message: str
    email: str
    name: str
    verification_url: str
    expires_at: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
