from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from wagehire.core.access_policy import Caller
from wagehire.core.auth_dependency import get_current_user, get_db
from wagehire.schemas.auth import MessageResponse
from wagehire.schemas.feedback import FeedbackCreate, FeedbackResponse
from wagehire.schemas.interview import (
    InterviewCreate,
    InterviewDetailResponse,
    InterviewListResponse,
    InterviewMutationResponse,
    InterviewStatus,
    InterviewUpdate,
)
from wagehire.services import feedback_service, interview_service

router = APIRouter(prefix="/interviews", tags=["Interviews"])


@router.get("", response_model=InterviewListResponse)
def list_interviews(
    status: Optional[InterviewStatus] = Query(None, description="Filter by status"),
    company_name: Optional[str] = Query(None, description="Company name contains"),
    job_title: Optional[str] = Query(None, description="Job title contains"),
    search: Optional[str] = Query(None, description="Search candidate name, company or job title"),
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Interviews visible to the caller.

    Candidates see their own; admins see everyone's.
    """
    interviews = interview_service.list_interviews(
        db, caller, status=status, company_name=company_name, job_title=job_title, search=search
    )
    return {"interviews": interviews}


@router.get("/{interview_id}", response_model=InterviewDetailResponse)
def get_interview(
    interview_id: int,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"interview": interview_service.get_interview(db, caller, interview_id)}


@router.post("", status_code=status.HTTP_201_CREATED, response_model=InterviewMutationResponse)
def create_interview(
    payload: InterviewCreate,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    interview = interview_service.create_interview(db, caller, payload)
    return {"message": "Interview scheduled successfully", "interview": interview}


@router.put("/{interview_id}", response_model=InterviewMutationResponse)
def update_interview(
    interview_id: int,
    payload: InterviewUpdate,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    interview = interview_service.update_interview(db, caller, interview_id, changes)
    return {"message": "Interview updated successfully", "interview": interview}


@router.delete("/{interview_id}", response_model=MessageResponse)
def delete_interview(
    interview_id: int,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    interview_service.delete_interview(db, caller, interview_id)
    return {"message": "Interview deleted successfully"}


@router.post("/{interview_id}/feedback", status_code=status.HTTP_201_CREATED, response_model=FeedbackResponse)
def submit_feedback(
    interview_id: int,
    payload: FeedbackCreate,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record feedback for one of the caller's interviews and mark it completed."""
    return feedback_service.submit_feedback(db, caller, interview_id, payload)


@router.get("/{interview_id}/feedback", response_model=FeedbackResponse)
def get_interview_feedback(
    interview_id: int,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return feedback_service.get_feedback_for_interview(db, caller, interview_id)
