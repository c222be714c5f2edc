"""
Pydantic schemas for interview feedback.
"""
import enum
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, field_validator


class Recommendation(str, enum.Enum):
    HIRE = "hire"
    REJECT = "reject"
    MAYBE = "maybe"


RATING_FIELDS = (
    "technical_skills",
    "communication_skills",
    "problem_solving",
    "cultural_fit",
    "overall_rating",
)


class FeedbackCreate(BaseModel):
    technical_skills: int = Field(..., ge=1, le=5)
    communication_skills: int = Field(..., ge=1, le=5)
    problem_solving: int = Field(..., ge=1, le=5)
    cultural_fit: int = Field(..., ge=1, le=5)
    overall_rating: int = Field(..., ge=1, le=5)
    feedback_text: str = Field(..., min_length=10, description="At least 10 characters")
    recommendation: Recommendation

    @field_validator("feedback_text")
    @classmethod
    def strip_feedback(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Feedback must be at least 10 characters")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "technical_skills": 4,
                "communication_skills": 5,
                "problem_solving": 4,
                "cultural_fit": 4,
                "overall_rating": 4,
                "feedback_text": "Strong system design round, good follow-up questions.",
                "recommendation": "hire"
            }
        }


class FeedbackUpdate(BaseModel):
    """Partial update; only sent fields change, none may be null."""
    technical_skills: Optional[int] = Field(None, ge=1, le=5)
    communication_skills: Optional[int] = Field(None, ge=1, le=5)
    problem_solving: Optional[int] = Field(None, ge=1, le=5)
    cultural_fit: Optional[int] = Field(None, ge=1, le=5)
    overall_rating: Optional[int] = Field(None, ge=1, le=5)
    feedback_text: Optional[str] = Field(None, min_length=10)
    recommendation: Optional[Recommendation] = None

    @field_validator(*RATING_FIELDS, "feedback_text", "recommendation")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class FeedbackResponse(BaseModel):
    id: int
    interview_id: int
    candidate_id: int
    technical_skills: int
    communication_skills: int
    problem_solving: int
    cultural_fit: int
    overall_rating: int
    feedback_text: str
    recommendation: str
    received_at: Optional[datetime] = None
    company_name: Optional[str] = None
    job_title: Optional[str] = None

    class Config:
        from_attributes = True


class FeedbackListResponse(BaseModel):
    feedback: List[FeedbackResponse]
