"""
Access policy for the two fixed roles.

Admins may read and write every row. Candidates may only touch rows they
own. For list reads the policy does not answer allow/deny; it hands back the
ownership predicate that the query composer ANDs in front of everything else,
so "my interviews" and "all interviews" share one query path.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional, Union

from wagehire.core.errors import Forbidden, NotFound
from wagehire.core.query_composer import FilterSpec

logger = logging.getLogger(__name__)


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    CANDIDATE = "candidate"


@dataclass(frozen=True)
class AdminCaller:
    id: int
    email: str
    role = UserRole.ADMIN


@dataclass(frozen=True)
class CandidateCaller:
    """A candidate; ``id`` is the owner id of everything they may see."""
    id: int
    email: str
    role = UserRole.CANDIDATE


Caller = Union[AdminCaller, CandidateCaller]


def caller_for(user) -> Caller:
    """Build the caller variant for a loaded user row."""
    if user.role == UserRole.ADMIN.value:
        return AdminCaller(id=user.id, email=user.email)
    return CandidateCaller(id=user.id, email=user.email)


def can_access(caller: Caller, owner_id: int) -> bool:
    """Admin: always. Candidate: only their own rows."""
    if isinstance(caller, AdminCaller):
        return True
    return owner_id == caller.id


def ownership_scope(caller: Caller, column: str) -> Optional[FilterSpec]:
    """
    Predicate restricting a query to rows the caller owns.

    Args:
        caller: Authenticated caller
        column: Owner column of the queried table, e.g. ``i.candidate_id``

    Returns:
        None for admins, ``column = caller.id`` for candidates
    """
    if isinstance(caller, AdminCaller):
        return None
    return FilterSpec.equals(column, caller.id)


def require_admin(caller: Caller) -> AdminCaller:
    if not isinstance(caller, AdminCaller):
        logger.warning(f"Admin access denied: user_id={caller.id}")
        raise Forbidden("Admin access required")
    return caller


def ensure_access(caller: Caller, owner_id: int, resource: str) -> None:
    """Out-of-scope rows are reported as missing, never as forbidden."""
    if not can_access(caller, owner_id):
        raise NotFound(f"{resource} not found")


def ensure_not_self(caller: Caller, target_id: int, action: str) -> None:
    """
    Refuse an admin acting on their own account.

    Covers demotion and deletion; holds even for the last remaining admin.
    """
    if target_id == caller.id:
        logger.warning(f"Self-targeted admin action refused: user_id={caller.id}, action={action}")
        raise Forbidden(f"Cannot {action} your own account")
