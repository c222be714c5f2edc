"""
Interview service.

Every read goes through the query composer with the caller's ownership scope
in front, so candidates only ever see their own rows and admins see all of
them through the same statement. Rows outside the scope are reported as not
found.
"""
import logging
from typing import Dict, Any, List, Optional

from sqlalchemy.orm import Session

from wagehire.core.access_policy import Caller, ownership_scope
from wagehire.core.errors import NotFound, ValidationFailed
from wagehire.core.query_composer import FilterSpec, compose_delete, compose_select, compose_update
from wagehire.db.models.interview import Interview
from wagehire.schemas.interview import InterviewCreate, InterviewStatus
from wagehire.services.feedback_service import FEEDBACK_SELECT

logger = logging.getLogger(__name__)

MIN_DURATION = 15
MAX_DURATION = 480

INTERVIEW_SELECT = (
    "SELECT i.*, u.name AS candidate_name, u.email AS candidate_email "
    "FROM interviews i JOIN users u ON i.candidate_id = u.id"
)

INTERVIEW_DETAIL_SELECT = (
    "SELECT i.*, u.name AS candidate_name, u.email AS candidate_email, "
    "u.phone AS candidate_phone, u.resume_url AS candidate_resume "
    "FROM interviews i JOIN users u ON i.candidate_id = u.id"
)

SEARCH_COLUMNS = ("u.name", "i.company_name", "i.job_title")


def validate_duration(status, duration: Optional[int]) -> None:
    """
    Duration may only be absent for uncertain interviews, and any value
    given must lie in [15, 480] minutes.

    Raises:
        ValidationFailed: on either violation
    """
    if duration is None:
        if InterviewStatus(status) is not InterviewStatus.UNCERTAIN:
            raise ValidationFailed("Duration is required for non-uncertain interviews")
        return
    if not MIN_DURATION <= duration <= MAX_DURATION:
        raise ValidationFailed(
            f"Duration must be a number between {MIN_DURATION} and {MAX_DURATION} minutes"
        )


def list_interviews(
    db: Session,
    caller: Caller,
    status: Optional[str] = None,
    company_name: Optional[str] = None,
    job_title: Optional[str] = None,
    search: Optional[str] = None,
    candidate_id: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    List interviews visible to the caller, newest scheduled first.

    Args:
        db: Database session
        caller: Authenticated caller
        status: Exact status match
        company_name: Case-insensitive substring of the company name
        job_title: Case-insensitive substring of the job title
        search: One term matched against candidate name, company and job title
        candidate_id: Restrict to one candidate's interviews

    Returns:
        Interview rows joined with the candidate's name and email
    """
    query = compose_select(
        INTERVIEW_SELECT,
        filters=[
            FilterSpec.equals("i.status", status),
            FilterSpec.contains("i.company_name", company_name),
            FilterSpec.contains("i.job_title", job_title),
            FilterSpec.search(SEARCH_COLUMNS, search),
            FilterSpec.equals("i.candidate_id", candidate_id),
        ],
        scope=ownership_scope(caller, "i.candidate_id"),
        order_by="i.scheduled_date DESC",
    )
    return query.fetch_all(db)


def _load_interview(db: Session, caller: Caller, interview_id: int, base: str = INTERVIEW_SELECT) -> Dict[str, Any]:
    row = compose_select(
        base,
        filters=[FilterSpec.equals("i.id", interview_id)],
        scope=ownership_scope(caller, "i.candidate_id"),
    ).fetch_one(db)
    if row is None:
        raise NotFound("Interview not found")
    return row


def get_interview(db: Session, caller: Caller, interview_id: int) -> Dict[str, Any]:
    """Single interview with candidate contact details and its feedback, if any."""
    interview = _load_interview(db, caller, interview_id, base=INTERVIEW_DETAIL_SELECT)
    interview["feedback"] = compose_select(
        FEEDBACK_SELECT,
        filters=[FilterSpec.equals("f.interview_id", interview_id)],
        order_by="f.received_at DESC",
        limit=1,
    ).fetch_one(db)
    return interview


def create_interview(db: Session, caller: Caller, payload: InterviewCreate) -> Dict[str, Any]:
    """Schedule an interview owned by the caller."""
    validate_duration(payload.status, payload.duration)

    values = payload.model_dump()
    values["status"] = payload.status.value
    values["interview_type"] = payload.interview_type.value

    interview = Interview(candidate_id=caller.id, **values)
    db.add(interview)
    db.commit()
    db.refresh(interview)

    logger.info(f"Interview created: interview_id={interview.id}, candidate_id={caller.id}")
    return _load_interview(db, caller, interview.id)


def update_interview(db: Session, caller: Caller, interview_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply a partial update to an interview the caller may access.

    The duration rule is re-checked against the merged row whenever the
    change-set touches status or duration.

    Raises:
        NotFound: Interview absent or out of scope
        ValidationFailed: Empty change-set or duration rule violated
    """
    current = _load_interview(db, caller, interview_id)

    if not changes:
        raise ValidationFailed("No fields to update")

    if "status" in changes or "duration" in changes:
        merged = {**current, **changes}
        validate_duration(merged["status"], merged["duration"])

    compose_update(
        "interviews",
        changes,
        where=[FilterSpec.equals("id", interview_id)],
    ).execute(db)
    db.commit()

    logger.info(f"Interview updated: interview_id={interview_id}, fields={sorted(changes)}")
    return _load_interview(db, caller, interview_id)


def delete_interview(db: Session, caller: Caller, interview_id: int) -> None:
    """Delete an interview together with its feedback rows."""
    _load_interview(db, caller, interview_id)

    compose_delete("interview_feedback", [FilterSpec.equals("interview_id", interview_id)]).execute(db)
    compose_delete("interviews", [FilterSpec.equals("id", interview_id)]).execute(db)
    db.commit()

    logger.info(f"Interview deleted: interview_id={interview_id}, by user_id={caller.id}")
