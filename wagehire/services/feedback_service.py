"""
Interview feedback service.

A candidate submits at most one feedback record per interview. Submitting
marks the interview completed in the same transaction.
"""
import logging
from typing import Dict, Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wagehire.core.access_policy import Caller, ownership_scope
from wagehire.core.errors import Conflict, NotFound, ValidationFailed
from wagehire.core.query_composer import FilterSpec, compose_delete, compose_select, compose_update
from wagehire.db.models.feedback import InterviewFeedback
from wagehire.schemas.feedback import FeedbackCreate

logger = logging.getLogger(__name__)

FEEDBACK_SELECT = (
    "SELECT f.*, i.company_name AS company_name, i.job_title AS job_title "
    "FROM interview_feedback f JOIN interviews i ON f.interview_id = i.id"
)


def submit_feedback(db: Session, caller: Caller, interview_id: int, payload: FeedbackCreate) -> Dict[str, Any]:
    """
    Record feedback for one of the caller's own interviews.

    Only the interview's owner may submit, admins included.

    Raises:
        NotFound: Interview absent or not owned by the caller
        Conflict: Feedback already submitted for this interview
    """
    owned = compose_select(
        "SELECT id FROM interviews",
        filters=[FilterSpec.equals("id", interview_id), FilterSpec.equals("candidate_id", caller.id)],
    ).fetch_one(db)
    if owned is None:
        raise NotFound("Interview not found or unauthorized")

    existing = compose_select(
        "SELECT id FROM interview_feedback",
        filters=[FilterSpec.equals("interview_id", interview_id), FilterSpec.equals("candidate_id", caller.id)],
    ).fetch_one(db)
    if existing is not None:
        raise Conflict("Feedback already submitted for this interview")

    values = payload.model_dump()
    values["recommendation"] = payload.recommendation.value
    feedback = InterviewFeedback(interview_id=interview_id, candidate_id=caller.id, **values)

    try:
        db.add(feedback)
        db.flush()
        compose_update(
            "interviews",
            {"status": "completed"},
            where=[FilterSpec.equals("id", interview_id)],
        ).execute(db)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Feedback already submitted for this interview")

    logger.info(f"Feedback submitted: feedback_id={feedback.id}, interview_id={interview_id}")
    return _load_feedback(db, caller, feedback.id)


def list_feedback(
    db: Session,
    caller: Caller,
    recommendation: Optional[str] = None,
    interview_id: Optional[int] = None,
) -> List[Dict[str, Any]]:
    return compose_select(
        FEEDBACK_SELECT,
        filters=[
            FilterSpec.equals("f.recommendation", recommendation),
            FilterSpec.equals("f.interview_id", interview_id),
        ],
        scope=ownership_scope(caller, "f.candidate_id"),
        order_by="f.received_at DESC",
    ).fetch_all(db)


def _load_feedback(db: Session, caller: Caller, feedback_id: int) -> Dict[str, Any]:
    row = compose_select(
        FEEDBACK_SELECT,
        filters=[FilterSpec.equals("f.id", feedback_id)],
        scope=ownership_scope(caller, "f.candidate_id"),
    ).fetch_one(db)
    if row is None:
        raise NotFound("Feedback not found")
    return row


def get_feedback_for_interview(db: Session, caller: Caller, interview_id: int) -> Dict[str, Any]:
    row = compose_select(
        FEEDBACK_SELECT,
        filters=[FilterSpec.equals("f.interview_id", interview_id)],
        scope=ownership_scope(caller, "f.candidate_id"),
        order_by="f.received_at DESC",
        limit=1,
    ).fetch_one(db)
    if row is None:
        raise NotFound("Feedback not found")
    return row


def update_feedback(db: Session, caller: Caller, feedback_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
    _load_feedback(db, caller, feedback_id)

    if not changes:
        raise ValidationFailed("No fields to update")

    # interview_feedback has no updated_at column
    compose_update(
        "interview_feedback",
        changes,
        where=[FilterSpec.equals("id", feedback_id)],
        touch_updated_at=False,
    ).execute(db)
    db.commit()

    logger.info(f"Feedback updated: feedback_id={feedback_id}, fields={sorted(changes)}")
    return _load_feedback(db, caller, feedback_id)


def delete_feedback(db: Session, caller: Caller, feedback_id: int) -> None:
    _load_feedback(db, caller, feedback_id)

    compose_delete("interview_feedback", [FilterSpec.equals("id", feedback_id)]).execute(db)
    db.commit()

    logger.info(f"Feedback deleted: feedback_id={feedback_id}, by user_id={caller.id}")
