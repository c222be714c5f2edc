"""
Parameterized query composition.

Statements are assembled from constant SQL text plus an ordered list of
``FilterSpec`` objects. Each present filter contributes one predicate
fragment with positional ``?`` placeholders and exactly as many bound
parameters, in the same order. Caller-supplied values only ever travel as
parameters; the only text taken from outside this module is column and table
names, which must be plain identifiers.

Fragment order is fixed: the ownership scope (if any) comes first, then the
caller's filters in declaration order.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import bindparam, text
from sqlalchemy.sql.elements import TextClause

from wagehire.core.errors import ValidationFailed

PLACEHOLDER = "?"
LIKE_ESCAPE = "!"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")
_ORDER_BY = re.compile(
    r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?( (ASC|DESC))?"
    r"(, [A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?( (ASC|DESC))?)*$"
)


def _check_identifier(name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValueError(f"Not a valid column or table name: {name!r}")
    return name


class Comparison(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"  # case-insensitive LIKE %term%
    AT_LEAST = "at_least"
    BEFORE = "before"


_OPERATORS = {
    Comparison.EQUALS: "=",
    Comparison.AT_LEAST: ">=",
    Comparison.BEFORE: "<",
}


@dataclass(frozen=True)
class FilterSpec:
    """One optional predicate: which column(s), how to compare, and the value.

    A filter whose value is ``None`` or an empty string is absent and produces
    neither a fragment nor a parameter. A filter over several columns is a
    free-text search: the columns are OR'd inside one parenthesized group,
    each with its own parameter.
    """
    columns: Tuple[str, ...]
    comparison: Comparison
    value: Any = None

    def __post_init__(self):
        if not self.columns:
            raise ValueError("FilterSpec needs at least one column")
        for column in self.columns:
            _check_identifier(column)

    @classmethod
    def equals(cls, column: str, value: Any) -> "FilterSpec":
        return cls((column,), Comparison.EQUALS, value)

    @classmethod
    def contains(cls, column: str, value: Optional[str]) -> "FilterSpec":
        return cls((column,), Comparison.CONTAINS, value)

    @classmethod
    def at_least(cls, column: str, value: Any) -> "FilterSpec":
        return cls((column,), Comparison.AT_LEAST, value)

    @classmethod
    def before(cls, column: str, value: Any) -> "FilterSpec":
        return cls((column,), Comparison.BEFORE, value)

    @classmethod
    def search(cls, columns: Sequence[str], value: Optional[str]) -> "FilterSpec":
        return cls(tuple(columns), Comparison.CONTAINS, value)

    @property
    def present(self) -> bool:
        if self.value is None:
            return False
        if isinstance(self.value, str) and self.value.strip() == "":
            return False
        return True

    def render(self) -> Tuple[str, List[Any]]:
        """Return the fragment text and its parameters."""
        if self.comparison is Comparison.CONTAINS:
            term = f"%{_escape_like(str(self.value).strip().lower())}%"
            parts = [f"LOWER({column}) LIKE {PLACEHOLDER} ESCAPE '{LIKE_ESCAPE}'" for column in self.columns]
            params = [term for _ in self.columns]
        else:
            operator = _OPERATORS[self.comparison]
            parts = [f"{column} {operator} {PLACEHOLDER}" for column in self.columns]
            params = [_plain(self.value) for _ in self.columns]

        if len(parts) == 1:
            return parts[0], params
        joiner = " OR " if self.comparison is Comparison.CONTAINS else " AND "
        return "(" + joiner.join(parts) + ")", params


def _escape_like(term: str) -> str:
    # Wildcards in the search term match literally
    for char in (LIKE_ESCAPE, "%", "_"):
        term = term.replace(char, LIKE_ESCAPE + char)
    return term


def _plain(value: Any) -> Any:
    # Enum members bind as their underlying value
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass
class ComposedQuery:
    """Statement text with positional placeholders and the matching parameters."""
    sql: str
    params: List[Any] = field(default_factory=list)

    @property
    def placeholder_count(self) -> int:
        return self.sql.count(PLACEHOLDER)

    def to_statement(self) -> TextClause:
        """
        Rebind the positional parameters to an executable ``text()`` statement.

        Placeholders are renamed ``:p0``, ``:p1``, ... in order of appearance,
        so the i-th ``?`` always receives ``params[i]``.
        """
        if self.placeholder_count != len(self.params):
            raise ValueError(
                f"Placeholder/parameter mismatch: {self.placeholder_count} placeholders, "
                f"{len(self.params)} parameters"
            )

        pieces = self.sql.split(PLACEHOLDER)
        sql = pieces[0]
        for index, piece in enumerate(pieces[1:]):
            sql += f":p{index}" + piece

        statement = text(sql)
        if self.params:
            statement = statement.bindparams(
                *[bindparam(f"p{index}", value) for index, value in enumerate(self.params)]
            )
        return statement

    def fetch_all(self, db) -> List[Dict[str, Any]]:
        return [dict(row) for row in db.execute(self.to_statement()).mappings().all()]

    def fetch_one(self, db) -> Optional[Dict[str, Any]]:
        row = db.execute(self.to_statement()).mappings().first()
        return dict(row) if row is not None else None

    def scalar(self, db) -> Any:
        return db.execute(self.to_statement()).scalar()

    def execute(self, db) -> int:
        """Run a write statement; returns the affected row count."""
        return db.execute(self.to_statement()).rowcount


def _where(fragments: List[Tuple[str, List[Any]]]) -> Tuple[str, List[Any]]:
    if not fragments:
        return "", []
    clause = " WHERE " + " AND ".join(fragment for fragment, _ in fragments)
    params: List[Any] = []
    for _, fragment_params in fragments:
        params.extend(fragment_params)
    return clause, params


def _collect(filters: Sequence[Optional[FilterSpec]], scope: Optional[FilterSpec] = None):
    ordered = ([scope] if scope is not None else []) + list(filters)
    return [item.render() for item in ordered if item is not None and item.present]


def compose_select(
    base: str,
    filters: Sequence[Optional[FilterSpec]] = (),
    scope: Optional[FilterSpec] = None,
    group_by: Optional[str] = None,
    order_by: Optional[str] = None,
    limit: Optional[int] = None,
) -> ComposedQuery:
    """
    Build a SELECT from a constant base statement and optional filters.

    Args:
        base: SELECT ... FROM ... [JOIN ...] text without a WHERE clause
        filters: Caller filters, applied in order; absent ones are skipped
        scope: Ownership restriction from the access policy, always first
        group_by: Column list for GROUP BY
        order_by: Column list with optional ASC/DESC
        limit: Row limit, bound as a parameter

    Returns:
        ComposedQuery with aligned placeholders and parameters
    """
    if PLACEHOLDER in base:
        raise ValueError("Base statement must not contain placeholders")

    where, params = _where(_collect(filters, scope))
    sql = base.strip() + where

    if group_by:
        for column in group_by.split(", "):
            _check_identifier(column)
        sql += f" GROUP BY {group_by}"
    if order_by:
        if not _ORDER_BY.match(order_by):
            raise ValueError(f"Invalid ORDER BY clause: {order_by!r}")
        sql += f" ORDER BY {order_by}"
    if limit is not None:
        sql += f" LIMIT {PLACEHOLDER}"
        params.append(int(limit))

    return ComposedQuery(sql, params)


def compose_count(table: str, filters: Sequence[Optional[FilterSpec]] = ()) -> ComposedQuery:
    _check_identifier(table)
    return compose_select(f"SELECT COUNT(*) AS count FROM {table}", filters)


def compose_update(
    table: str,
    changes: Mapping[str, Any],
    where: Sequence[FilterSpec],
    touch_updated_at: bool = True,
) -> ComposedQuery:
    """
    Build an UPDATE whose SET clause covers exactly the keys in ``changes``.

    A key present with value ``None`` sets the column to NULL; keys not in
    ``changes`` are left untouched.

    Raises:
        ValidationFailed: if ``changes`` is empty
        ValueError: if ``where`` yields no predicate
    """
    _check_identifier(table)
    if not changes:
        raise ValidationFailed("No fields to update")

    assignments = []
    params: List[Any] = []
    for column, value in changes.items():
        assignments.append(f"{_check_identifier(column)} = {PLACEHOLDER}")
        params.append(_plain(value))
    if touch_updated_at:
        assignments.append("updated_at = CURRENT_TIMESTAMP")

    where_clause, where_params = _where(_collect(where))
    if not where_clause:
        raise ValueError("UPDATE without a WHERE clause")

    sql = f"UPDATE {table} SET " + ", ".join(assignments) + where_clause
    return ComposedQuery(sql, params + where_params)


def compose_delete(table: str, where: Sequence[FilterSpec]) -> ComposedQuery:
    _check_identifier(table)
    where_clause, params = _where(_collect(where))
    if not where_clause:
        raise ValueError("DELETE without a WHERE clause")
    return ComposedQuery(f"DELETE FROM {table}" + where_clause, params)
