"""
Pydantic schemas for interview endpoints.

Field-level shape (enums, round range, required text) is checked here.
The duration/status coupling depends on the stored row during updates, so it
lives in the interview service.
"""
import enum
from typing import Optional, List
from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator

from wagehire.schemas.feedback import FeedbackResponse


class InterviewStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    UNCERTAIN = "uncertain"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


class InterviewType(str, enum.Enum):
    HR = "hr"
    TECHNICAL = "technical"
    FINAL = "final"


TEXT_FIELDS = (
    "location",
    "notes",
    "company_website",
    "company_linkedin_url",
    "other_urls",
    "job_description",
    "salary_range",
    "interviewer_name",
    "interviewer_email",
    "interviewer_position",
    "interviewer_linkedin_url",
)


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Stored as naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class InterviewFields(BaseModel):
    scheduled_date: Optional[datetime] = None
    duration: Optional[int] = Field(None, description="Minutes, 15-480; may be omitted when status is uncertain")
    location: Optional[str] = None
    notes: Optional[str] = None
    company_website: Optional[str] = None
    company_linkedin_url: Optional[str] = None
    other_urls: Optional[str] = None
    job_description: Optional[str] = None
    salary_range: Optional[str] = None
    interviewer_name: Optional[str] = None
    interviewer_email: Optional[str] = None
    interviewer_position: Optional[str] = None
    interviewer_linkedin_url: Optional[str] = None

    @field_validator(*TEXT_FIELDS)
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v

    @field_validator("scheduled_date")
    @classmethod
    def normalize_scheduled_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _naive_utc(v)


class InterviewCreate(InterviewFields):
    """Request schema for scheduling an interview for the authenticated candidate."""
    company_name: str = Field(..., min_length=1, description="Company name is required")
    job_title: str = Field(..., min_length=1, description="Job title is required")
    round: int = Field(1, ge=1, le=10, description="Round must be a number between 1 and 10")
    status: InterviewStatus = InterviewStatus.SCHEDULED
    interview_type: InterviewType = InterviewType.TECHNICAL

    @field_validator("company_name", "job_title")
    @classmethod
    def required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "company_name": "Acme Corp",
                "job_title": "Backend Engineer",
                "scheduled_date": "2026-11-02T14:00:00Z",
                "duration": 60,
                "round": 2,
                "status": "scheduled",
                "interview_type": "technical",
                "interviewer_name": "Sam Lee"
            }
        }


class InterviewUpdate(InterviewFields):
    """Partial update; only the fields sent are applied."""
    company_name: Optional[str] = Field(None, min_length=1)
    job_title: Optional[str] = Field(None, min_length=1)
    round: Optional[int] = Field(None, ge=1, le=10, description="Round must be a number between 1 and 10")
    status: Optional[InterviewStatus] = None
    interview_type: Optional[InterviewType] = None

    @field_validator("company_name", "job_title", "round", "status", "interview_type")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        if isinstance(v, str) and not isinstance(v, enum.Enum):
            v = v.strip()
            if not v:
                raise ValueError("Field cannot be empty")
        return v


class InterviewResponse(BaseModel):
    id: int
    candidate_id: int
    company_name: str
    job_title: str
    scheduled_date: Optional[datetime] = None
    duration: Optional[int] = None
    status: str
    round: int
    interview_type: str
    location: Optional[str] = None
    notes: Optional[str] = None
    company_website: Optional[str] = None
    company_linkedin_url: Optional[str] = None
    other_urls: Optional[str] = None
    job_description: Optional[str] = None
    salary_range: Optional[str] = None
    interviewer_name: Optional[str] = None
    interviewer_email: Optional[str] = None
    interviewer_position: Optional[str] = None
    interviewer_linkedin_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None

    class Config:
        from_attributes = True


class InterviewDetail(InterviewResponse):
    candidate_phone: Optional[str] = None
    candidate_resume: Optional[str] = None
    feedback: Optional[FeedbackResponse] = None


class InterviewListResponse(BaseModel):
    interviews: List[InterviewResponse]


class InterviewDetailResponse(BaseModel):
    interview: InterviewDetail


class InterviewMutationResponse(BaseModel):
    message: str
    interview: InterviewResponse
