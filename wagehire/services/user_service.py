"""
User service: profiles, admin user management and the candidate dashboard.
"""
import logging
from datetime import timedelta
from typing import Dict, Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wagehire.core.access_policy import Caller, UserRole, ensure_access, ensure_not_self, require_admin
from wagehire.core.clock import utcnow
from wagehire.core.errors import Conflict, NotFound, ValidationFailed
from wagehire.core.query_composer import FilterSpec, compose_count, compose_delete, compose_select, compose_update
from wagehire.services import interview_service

logger = logging.getLogger(__name__)

USER_COLUMNS = (
    "id, email, name, role, phone, resume_url, current_position, "
    "experience_years, skills, email_verified, created_at"
)

USER_SELECT = f"SELECT {USER_COLUMNS} FROM users"

CANDIDATE_SELECT = (
    "SELECT u.id, u.email, u.name, u.role, u.phone, u.resume_url, u.current_position, "
    "u.experience_years, u.skills, u.email_verified, u.created_at, COUNT(i.id) AS interview_count "
    "FROM users u LEFT JOIN interviews i ON u.id = i.candidate_id"
)

USER_SEARCH_COLUMNS = ("name", "email", "current_position")

# (field, required) pairs used for profile completion
PROFILE_FIELDS = (
    ("name", True),
    ("email", True),
    ("phone", False),
    ("resume_url", False),
    ("current_position", False),
    ("experience_years", False),
    ("skills", False),
)


def _load_user(db: Session, user_id: int) -> Dict[str, Any]:
    row = compose_select(USER_SELECT, [FilterSpec.equals("id", user_id)]).fetch_one(db)
    if row is None:
        raise NotFound("User not found")
    return row


def list_users(
    db: Session,
    caller: Caller,
    role: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """All users, admin only, ordered by name."""
    require_admin(caller)
    return compose_select(
        USER_SELECT,
        filters=[FilterSpec.equals("role", role), FilterSpec.search(USER_SEARCH_COLUMNS, search)],
        order_by="name ASC",
    ).fetch_all(db)


def get_user(db: Session, caller: Caller, user_id: int) -> Dict[str, Any]:
    """
    One user with their interviews.

    Admins may read anyone; a candidate only themselves. Anyone else is
    reported as missing.
    """
    ensure_access(caller, user_id, "User")

    user = _load_user(db, user_id)
    user["interviews"] = interview_service.list_interviews(db, caller, candidate_id=user_id)
    return user


def update_profile(db: Session, caller: Caller, changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Update the caller's own profile with the fields that were sent.

    Raises:
        ValidationFailed: Nothing to update
        Conflict: Email already used by another account
    """
    if not changes:
        raise ValidationFailed("No fields to update")

    if "email" in changes:
        changes = {**changes, "email": changes["email"].strip().lower()}
        taken = compose_select(
            "SELECT id FROM users",
            filters=[FilterSpec.equals("email", changes["email"])],
        ).fetch_one(db)
        if taken is not None and taken["id"] != caller.id:
            raise Conflict("Email already exists")

    try:
        compose_update("users", changes, where=[FilterSpec.equals("id", caller.id)]).execute(db)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Email already exists")

    logger.info(f"Profile updated: user_id={caller.id}, fields={sorted(changes)}")
    return _load_user(db, caller.id)


def list_candidates(
    db: Session,
    caller: Caller,
    role: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Users with their interview counts, newest first. Admin only."""
    require_admin(caller)
    return compose_select(
        CANDIDATE_SELECT,
        filters=[
            FilterSpec.equals("u.role", role),
            FilterSpec.search(("u.name", "u.email", "u.current_position"), search),
        ],
        group_by="u.id",
        order_by="u.created_at DESC",
    ).fetch_all(db)


def update_role(db: Session, caller: Caller, user_id: int, role: UserRole) -> Dict[str, Any]:
    """
    Change a user's role.

    An admin may not demote themselves, even when other admins exist.

    Raises:
        Forbidden: Not an admin, or self-demotion
        NotFound: No such user
    """
    require_admin(caller)
    if role is not UserRole.ADMIN:
        ensure_not_self(caller, user_id, "remove admin role from")

    _load_user(db, user_id)

    compose_update("users", {"role": role}, where=[FilterSpec.equals("id", user_id)]).execute(db)
    db.commit()

    logger.info(f"Role updated: user_id={user_id}, role={role.value}, by user_id={caller.id}")
    return _load_user(db, user_id)


def delete_user(db: Session, caller: Caller, user_id: int) -> None:
    """
    Delete a user that has no interviews.

    Raises:
        Forbidden: Not an admin, or deleting own account
        NotFound: No such user
        Conflict: User still owns interviews
    """
    require_admin(caller)
    ensure_not_self(caller, user_id, "delete")

    _load_user(db, user_id)

    interviews = compose_count("interviews", [FilterSpec.equals("candidate_id", user_id)]).scalar(db)
    if interviews:
        raise Conflict("Cannot delete user with existing interviews. Please delete interviews first.")

    compose_delete("users", [FilterSpec.equals("id", user_id)]).execute(db)
    db.commit()

    logger.info(f"User deleted: user_id={user_id}, by user_id={caller.id}")


def _filled(value: Any, required: bool) -> bool:
    if isinstance(value, str):
        return value.strip() != ""
    if value is None:
        return False
    if required:
        return True
    # Optional numeric fields only count when positive
    return value > 0


def profile_completion(user: Dict[str, Any]) -> int:
    completed = sum(1 for name, required in PROFILE_FIELDS if _filled(user.get(name), required))
    return round(completed / len(PROFILE_FIELDS) * 100)


def candidate_dashboard(db: Session, caller: Caller) -> Dict[str, Any]:
    """
    Interview statistics for the caller's own interviews.

    Returns:
        Dictionary with total, per-status counts, scheduled interviews in the
        next 7 days and today, feedback received in the last 7 days, and the
        profile completion percentage
    """
    now = utcnow()
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    own = FilterSpec.equals("candidate_id", caller.id)
    scheduled = FilterSpec.equals("status", "scheduled")

    total = compose_count("interviews", [own]).scalar(db)
    by_status = compose_select(
        "SELECT status, COUNT(*) AS count FROM interviews",
        filters=[own],
        group_by="status",
        order_by="status ASC",
    ).fetch_all(db)
    upcoming = compose_count(
        "interviews",
        [own, scheduled, FilterSpec.at_least("scheduled_date", now), FilterSpec.before("scheduled_date", now + timedelta(days=7))],
    ).scalar(db)
    today = compose_count(
        "interviews",
        [own, scheduled, FilterSpec.at_least("scheduled_date", start_of_day), FilterSpec.before("scheduled_date", start_of_day + timedelta(days=1))],
    ).scalar(db)
    recent_feedback = compose_count(
        "interview_feedback",
        [own, FilterSpec.at_least("received_at", now - timedelta(days=7))],
    ).scalar(db)

    return {
        "stats": {
            "total_interviews": total,
            "by_status": by_status,
            "upcoming": upcoming,
            "today": today,
            "recent_feedback": recent_feedback,
            "profile_completion": profile_completion(_load_user(db, caller.id)),
        }
    }
