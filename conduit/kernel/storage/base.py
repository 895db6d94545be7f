"""
Storage engine contract consumed by the mutation protocol.

Resources and edges are addressed by table name and column equality so the
same request can be run against the SQL backend or the in-memory fake.
A key value may itself be a ``RowLookup``; it then matches the column of
whichever row the lookup selects, evaluated inside the same statement or
transaction as the rest of the operation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncContextManager, Mapping, Optional, Tuple


@dataclass(frozen=True)
class RowLookup:
    """Selects ``column`` of the row of ``table`` matching ``key``."""

    table: str
    key: Mapping[str, Any]
    column: str = "id"


@dataclass(frozen=True)
class ResourceRef:
    """A single owned row: where to find it and which column names its owner."""

    table: str
    key: Mapping[str, Any]
    owner_column: str = "author_id"
    id_column: str = "id"


@dataclass(frozen=True)
class EdgeRef:
    """One ordered pair of an association table."""

    table: str
    subject_column: str
    object_column: str
    subject: Any
    object: Any
    # check constraints that mean "this pair may never exist"
    forbidden_on: Tuple[str, ...] = field(default=())


@dataclass(frozen=True)
class MutationProbe:
    """The two facts a conditional mutation is classified from."""

    existed: bool
    applied: bool
    row: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class LockedRow:
    """A row read under an exclusive lock held until the transaction ends."""

    id: Any
    owner_id: Any
    values: Mapping[str, Any]


class StorageError(Exception):
    """Base class for storage failures surfaced to the protocol."""


class ConstraintViolation(StorageError):
    """
    A statement was rejected by a database constraint.

    ``kind`` is one of ``unique``, ``check``, ``foreign_key`` or ``None``
    when the engine did not say. ``name`` is the constraint name when it
    could be determined.
    """

    def __init__(self, name: Optional[str], kind: Optional[str] = None, message: str = ""):
        super().__init__(message or f"constraint violated: {name or kind or 'unknown'}")
        self.name = name
        self.kind = kind


class StorageTransaction(ABC):
    """Operations available inside one transaction."""

    @abstractmethod
    async def resolve(self, lookup: RowLookup, lock: bool = False) -> Optional[Any]:
        """Return the looked-up column value, or ``None`` if no row matches.

        With ``lock`` the row is share-locked so it cannot be deleted
        before the transaction ends.
        """

    @abstractmethod
    async def lock_owned(self, ref: ResourceRef) -> Optional[LockedRow]:
        """Read the row addressed by ``ref`` under an exclusive row lock."""

    @abstractmethod
    async def delete_owned(self, ref: ResourceRef, actor_id: Any) -> MutationProbe:
        """
        Delete the row if ``actor_id`` owns it.

        ``applied`` says the row was deleted. When it was not, ``existed``
        says the row is there under another owner. Both must describe one
        consistent snapshot: no other transaction may change the row
        between the two.
        """

    @abstractmethod
    async def update_row(self, table: str, row_id: Any, values: Mapping[str, Any],
                         id_column: str = "id") -> Mapping[str, Any]:
        """Apply ``values`` to the row and return it as updated.

        Raises ConstraintViolation when a constraint rejects the new values.
        """

    @abstractmethod
    async def insert_edge(self, edge: EdgeRef) -> None:
        """Insert the pair, doing nothing if it already exists."""

    @abstractmethod
    async def delete_edge(self, edge: EdgeRef) -> None:
        """Delete the pair if it exists."""


class StorageEngine(ABC):
    """Hands out transactions."""

    @abstractmethod
    def transaction(self) -> AsyncContextManager[StorageTransaction]:
        """
        Open a transaction scope.

        Leaving the scope normally commits (or leaves an already running
        outer transaction to its owner); raising rolls back.
        """
