"""
Pydantic schemas for user and profile endpoints.
"""
from typing import Optional, List
from datetime import datetime
from urllib.parse import urlparse
from pydantic import BaseModel, EmailStr, Field, field_validator

from wagehire.core.access_policy import UserRole
from wagehire.schemas.interview import InterviewResponse


def validate_optional_url(value: Optional[str]) -> Optional[str]:
    """Blank means "no URL"; anything else must be an absolute http(s) URL."""
    if value is None or value.strip() == "":
        return value
    parsed = urlparse(value.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Resume URL must be a valid URL")
    return value.strip()


class UserResponse(BaseModel):
    """Public view of a user; never carries the password hash or tokens."""
    id: int = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    name: str = Field(..., description="Display name")
    role: str = Field(..., description="admin or candidate")
    phone: Optional[str] = None
    resume_url: Optional[str] = None
    current_position: Optional[str] = None
    experience_years: Optional[int] = None
    skills: Optional[str] = None
    email_verified: Optional[bool] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": 2,
                "email": "jane.doe@example.com",
                "name": "Jane Doe",
                "role": "candidate",
                "phone": "+1 555 0100",
                "resume_url": "https://example.com/jane.pdf",
                "current_position": "Backend Engineer",
                "experience_years": 4,
                "skills": "Python, PostgreSQL",
                "email_verified": True,
                "created_at": "2026-01-15T10:30:00Z"
            }
        }


class UserListResponse(BaseModel):
    users: List[UserResponse] = Field(..., description="Users matching the filters")


class CandidateSummary(UserResponse):
    interview_count: int = Field(0, description="Number of interviews the user has scheduled")


class CandidateListResponse(BaseModel):
    candidates: List[CandidateSummary]


class UserProfileUpdate(BaseModel):
    """Only the fields actually sent are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    resume_url: Optional[str] = None
    current_position: Optional[str] = Field(None, max_length=200)
    experience_years: Optional[int] = Field(None, ge=0, le=50, description="Years of experience (0-50)")
    skills: Optional[str] = None

    @field_validator("name", "email")
    @classmethod
    def not_null(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Field cannot be empty")
        return v

    @field_validator("name", "phone", "current_position", "skills")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v

    @field_validator("resume_url")
    @classmethod
    def check_resume_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_url(v)

    class Config:
        json_schema_extra = {
            "example": {
                "current_position": "Senior Backend Engineer",
                "experience_years": 5
            }
        }


class RoleUpdateRequest(BaseModel):
    role: UserRole = Field(..., description="Role must be either admin or candidate")


class StatusCount(BaseModel):
    status: Optional[str] = None
    count: int


class CandidateDashboardStats(BaseModel):
    total_interviews: int
    by_status: List[StatusCount]
    upcoming: int = Field(..., description="Scheduled interviews in the next 7 days")
    today: int = Field(..., description="Scheduled interviews today")
    recent_feedback: int = Field(..., description="Feedback received in the last 7 days")
    profile_completion: int = Field(..., description="Profile completion percentage")


class CandidateDashboardResponse(BaseModel):
    stats: CandidateDashboardStats


class UserDetail(UserResponse):
    interviews: List[InterviewResponse] = Field(default_factory=list)


class UserDetailResponse(BaseModel):
    user: UserDetail


class UserMessageResponse(BaseModel):
    message: str
    user: UserResponse


class UserEnvelope(BaseModel):
    user: UserResponse
