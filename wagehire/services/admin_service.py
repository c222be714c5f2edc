"""
Aggregate statistics for the admin dashboard.
"""
from datetime import timedelta
from typing import Dict, Any

from sqlalchemy.orm import Session

from wagehire.core.access_policy import Caller, UserRole, require_admin
from wagehire.core.clock import utcnow
from wagehire.core.query_composer import FilterSpec, compose_count, compose_select
from wagehire.services.interview_service import INTERVIEW_SELECT

RECENT_DAYS = 7
RECENT_LIMIT = 10

EXPERIENCE_BANDS_SELECT = (
    "SELECT CASE "
    "WHEN experience_years < 1 THEN 'Entry Level' "
    "WHEN experience_years < 3 THEN 'Junior' "
    "WHEN experience_years < 5 THEN 'Mid Level' "
    "ELSE 'Senior' END AS level, COUNT(*) AS count "
    "FROM users"
)

RECENT_CANDIDATES_SELECT = (
    "SELECT id, name, email, current_position, experience_years, skills, created_at FROM users"
)


def admin_dashboard(db: Session, caller: Caller) -> Dict[str, Any]:
    """
    Totals, breakdowns and the last week's activity across all users.

    Returns:
        Dictionary with ``stats``, ``recent_interviews`` and ``recent_candidates``
    """
    require_admin(caller)

    since = utcnow() - timedelta(days=RECENT_DAYS)
    candidates = FilterSpec.equals("role", UserRole.CANDIDATE)

    stats = {
        "total_users": compose_count("users").scalar(db),
        "total_candidates": compose_count("users", [candidates]).scalar(db),
        "total_interviews": compose_count("interviews").scalar(db),
        "interviews_by_status": compose_select(
            "SELECT status, COUNT(*) AS count FROM interviews",
            group_by="status",
            order_by="status ASC",
        ).fetch_all(db),
        # at_least(0) also drops rows with no experience recorded
        "candidates_by_experience": compose_select(
            EXPERIENCE_BANDS_SELECT,
            filters=[candidates, FilterSpec.at_least("experience_years", 0)],
            group_by="level",
            order_by="level ASC",
        ).fetch_all(db),
    }

    recent_interviews = compose_select(
        INTERVIEW_SELECT,
        filters=[FilterSpec.at_least("i.created_at", since)],
        order_by="i.created_at DESC",
        limit=RECENT_LIMIT,
    ).fetch_all(db)

    recent_candidates = compose_select(
        RECENT_CANDIDATES_SELECT,
        filters=[candidates, FilterSpec.at_least("created_at", since)],
        order_by="created_at DESC",
        limit=RECENT_LIMIT,
    ).fetch_all(db)

    return {
        "stats": stats,
        "recent_interviews": recent_interviews,
        "recent_candidates": recent_candidates,
    }
