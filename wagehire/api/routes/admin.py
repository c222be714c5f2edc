"""
Admin-only endpoints.

Every route depends on ``get_admin_user``, so candidates are refused with 403
before any service code runs.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from wagehire.core.access_policy import Caller
from wagehire.core.auth_dependency import get_admin_user, get_db
from wagehire.schemas.admin import AdminDashboardResponse
from wagehire.schemas.auth import MessageResponse
from wagehire.schemas.interview import InterviewListResponse, InterviewStatus
from wagehire.schemas.user import CandidateListResponse, RoleUpdateRequest, UserListResponse, UserMessageResponse
from wagehire.services import admin_service, interview_service, user_service

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/candidates", response_model=CandidateListResponse)
def list_candidates(
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    caller: Caller = Depends(get_admin_user),
    db: Session = Depends(get_db),
):
    return {"candidates": user_service.list_candidates(db, caller, role=role, search=search)}


@router.get("/users", response_model=UserListResponse)
def list_users(
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    caller: Caller = Depends(get_admin_user),
    db: Session = Depends(get_db),
):
    return {"users": user_service.list_users(db, caller, role=role, search=search)}


@router.put("/users/{user_id}/role", response_model=UserMessageResponse)
def update_user_role(
    user_id: int,
    payload: RoleUpdateRequest,
    caller: Caller = Depends(get_admin_user),
    db: Session = Depends(get_db),
):
    user = user_service.update_role(db, caller, user_id, payload.role)
    return {"message": "User role updated successfully", "user": user}


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    caller: Caller = Depends(get_admin_user),
    db: Session = Depends(get_db),
):
    user_service.delete_user(db, caller, user_id)
    return {"message": "User deleted successfully"}


@router.get("/dashboard", response_model=AdminDashboardResponse)
def dashboard(
    caller: Caller = Depends(get_admin_user),
    db: Session = Depends(get_db),
):
    return admin_service.admin_dashboard(db, caller)


@router.get("/interviews", response_model=InterviewListResponse)
def list_all_interviews(
    status: Optional[InterviewStatus] = Query(None),
    search: Optional[str] = Query(None),
    caller: Caller = Depends(get_admin_user),
    db: Session = Depends(get_db),
):
    return {"interviews": interview_service.list_interviews(db, caller, status=status, search=search)}
