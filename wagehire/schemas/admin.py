"""
Pydantic schemas for the admin dashboard.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field

from wagehire.schemas.interview import InterviewResponse
from wagehire.schemas.user import StatusCount


class ExperienceBand(BaseModel):
    level: str = Field(..., description="Entry Level, Junior, Mid Level or Senior")
    count: int


class AdminStats(BaseModel):
    total_users: int
    total_candidates: int
    total_interviews: int
    interviews_by_status: List[StatusCount]
    candidates_by_experience: List[ExperienceBand]


class RecentCandidate(BaseModel):
    id: int
    name: str
    email: str
    current_position: Optional[str] = None
    experience_years: Optional[int] = None
    skills: Optional[str] = None
    created_at: Optional[datetime] = None


class AdminDashboardResponse(BaseModel):
    stats: AdminStats
    recent_interviews: List[InterviewResponse]
    recent_candidates: List[RecentCandidate]
