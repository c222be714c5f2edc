from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from wagehire.core.access_policy import Caller
from wagehire.core.auth_dependency import get_current_user, get_db
from wagehire.schemas.auth import MessageResponse
from wagehire.schemas.feedback import FeedbackListResponse, FeedbackResponse, FeedbackUpdate, Recommendation
from wagehire.services import feedback_service

router = APIRouter(prefix="/feedback", tags=["Feedback"])


@router.get("", response_model=FeedbackListResponse)
def list_feedback(
    recommendation: Optional[Recommendation] = Query(None),
    interview_id: Optional[int] = Query(None),
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    feedback = feedback_service.list_feedback(db, caller, recommendation=recommendation, interview_id=interview_id)
    return {"feedback": feedback}


@router.put("/{feedback_id}", response_model=FeedbackResponse)
def update_feedback(
    feedback_id: int,
    payload: FeedbackUpdate,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return feedback_service.update_feedback(db, caller, feedback_id, payload.model_dump(exclude_unset=True))


@router.delete("/{feedback_id}", response_model=MessageResponse)
def delete_feedback(
    feedback_id: int,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    feedback_service.delete_feedback(db, caller, feedback_id)
    return {"message": "Feedback deleted successfully"}
