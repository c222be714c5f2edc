from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from wagehire.core.access_policy import Caller
from wagehire.core.auth_dependency import get_current_user, get_db
from wagehire.schemas.interview import InterviewListResponse
from wagehire.schemas.user import (
    CandidateDashboardResponse,
    UserDetailResponse,
    UserListResponse,
    UserMessageResponse,
    UserProfileUpdate,
)
from wagehire.services import interview_service, user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=UserListResponse)
def list_users(
    role: Optional[str] = Query(None, description="Filter by role"),
    search: Optional[str] = Query(None, description="Search name, email or current position"),
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """All users (admin only)."""
    return {"users": user_service.list_users(db, caller, role=role, search=search)}


@router.get("/me/interviews", response_model=InterviewListResponse)
def my_interviews(
    status: Optional[str] = Query(None),
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The caller's own interviews, whatever their role."""
    return {"interviews": interview_service.list_interviews(db, caller, status=status, candidate_id=caller.id)}


@router.get("/me/dashboard", response_model=CandidateDashboardResponse)
def my_dashboard(
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return user_service.candidate_dashboard(db, caller)


@router.put("/me", response_model=UserMessageResponse)
def update_me(
    payload: UserProfileUpdate,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = user_service.update_profile(db, caller, payload.model_dump(exclude_unset=True))
    return {"message": "Profile updated successfully", "user": user}


@router.get("/{user_id}", response_model=UserDetailResponse)
def get_user(
    user_id: int,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """A user with their interviews; admins may read anyone, candidates only themselves."""
    return {"user": user_service.get_user(db, caller, user_id)}
