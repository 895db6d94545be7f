"""
Constraint identification for SQLAlchemy integrity errors.

PostgreSQL drivers report the violated constraint by name. SQLite only says
which columns a UNIQUE constraint covered, so those are matched back to the
named constraints declared on the model metadata.
"""

import re
from typing import Awaitable, Callable, Dict, FrozenSet, Mapping, Optional, Tuple, TypeVar

from sqlalchemy import MetaData, PrimaryKeyConstraint, UniqueConstraint
from sqlalchemy.exc import IntegrityError

from conduit.kernel.errors import UnprocessableEntityError
from conduit.kernel.storage.base import ConstraintViolation

T = TypeVar("T")

_SQLSTATE_KINDS = {
    "23505": "unique",
    "23514": "check",
    "23503": "foreign_key",
}

_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?P<columns>.+)$")
_SQLITE_CHECK = re.compile(r"CHECK constraint failed: (?P<name>\w+)")


class ConstraintRegistry:
    """Maps ``(table, columns)`` of declared unique constraints to their names."""

    def __init__(self, metadata: MetaData):
        self._by_columns: Dict[Tuple[str, FrozenSet[str]], str] = {}
        for table in metadata.tables.values():
            for constraint in table.constraints:
                if not isinstance(constraint, (UniqueConstraint, PrimaryKeyConstraint)):
                    continue
                name = constraint.name
                if name is None and isinstance(constraint, PrimaryKeyConstraint):
                    name = f"{table.name}_pkey"
                if name is None:
                    continue
                columns = frozenset(column.name for column in constraint.columns)
                self._by_columns[(table.name, columns)] = name

    def name_for(self, table: str, columns: FrozenSet[str]) -> Optional[str]:
        return self._by_columns.get((table, columns))


_registry: Optional[ConstraintRegistry] = None


def get_registry() -> ConstraintRegistry:
    global _registry
    if _registry is None:
        from conduit.kernel.models import Base

        _registry = ConstraintRegistry(Base.metadata)
    return _registry


def _driver_error(exc: IntegrityError):
    # asyncpg errors arrive wrapped by SQLAlchemy's adapter; the original
    # exception with the constraint details is the adapter's cause
    orig = exc.orig
    return getattr(orig, "__cause__", None) or orig


def violation_from(exc: IntegrityError) -> ConstraintViolation:
    """Describe an IntegrityError as a ConstraintViolation."""
    orig = exc.orig
    driver = _driver_error(exc)

    name = getattr(driver, "constraint_name", None)
    diag = getattr(driver, "diag", None)
    if name is None and diag is not None:
        name = getattr(diag, "constraint_name", None)
    sqlstate = (
        getattr(driver, "sqlstate", None)
        or getattr(orig, "sqlstate", None)
        or getattr(orig, "pgcode", None)
    )
    kind = _SQLSTATE_KINDS.get(str(sqlstate)) if sqlstate else None

    message = str(orig)
    if kind is None:
        match = _SQLITE_UNIQUE.search(message)
        if match:
            kind = "unique"
            qualified = [part.strip() for part in match.group("columns").split(",")]
            table = qualified[0].split(".", 1)[0]
            columns = frozenset(part.split(".", 1)[-1] for part in qualified)
            name = name or get_registry().name_for(table, columns)
        elif "CHECK constraint failed" in message:
            kind = "check"
            check = _SQLITE_CHECK.search(message)
            name = name or (check.group("name") if check else None)
        elif "FOREIGN KEY constraint failed" in message:
            kind = "foreign_key"

    return ConstraintViolation(name=name, kind=kind, message=message)


async def on_constraint(
    effect: Callable[[], Awaitable[T]],
    fields: Mapping[str, Tuple[str, str]],
) -> T:
    """
    Await ``effect``, translating known unique violations to field errors.

    ``fields`` maps a constraint name to the ``(field, message)`` reported
    for it. Violations of other constraints propagate unchanged. Both raw
    IntegrityErrors (ORM flushes) and ConstraintViolations (storage
    backends) are understood.
    """
    try:
        return await effect()
    except IntegrityError as exc:
        violation = violation_from(exc)
        if violation.name in fields:
            raise UnprocessableEntityError([fields[violation.name]]) from exc
        raise
    except ConstraintViolation as violation:
        if violation.name in fields:
            raise UnprocessableEntityError([fields[violation.name]]) from violation
        raise

