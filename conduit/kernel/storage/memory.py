"""
Deterministic in-memory storage engine.

Transactions are fully serialized by one asyncio lock and roll back by
restoring a snapshot, so every interleaving of concurrent callers is
equivalent to some serial order. Unique, primary key, foreign key and
check constraints are enforced and reported like the SQL backend reports
them. Intended for exercising the mutation protocol in tests.
"""

import asyncio
import copy
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import MetaData, PrimaryKeyConstraint, UniqueConstraint

from conduit.kernel.storage.base import (
    ConstraintViolation,
    EdgeRef,
    LockedRow,
    MutationProbe,
    ResourceRef,
    RowLookup,
    StorageEngine,
    StorageError,
    StorageTransaction,
)

Row = Dict[str, Any]
Check = Callable[[Mapping[str, Any]], bool]


@dataclass
class TableLayout:
    """Constraints of one in-memory table."""

    primary_key: Tuple[str, ...]
    primary_key_name: Optional[str] = None
    unique: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    foreign_keys: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    checks: Dict[str, Check] = field(default_factory=dict)


class InMemoryStorage(StorageEngine):
    """A handful of lists of dicts behind a transaction lock."""

    def __init__(self, schema: Mapping[str, TableLayout]):
        self.schema: Dict[str, TableLayout] = dict(schema)
        self.tables: Dict[str, List[Row]] = {name: [] for name in self.schema}
        self._lock = asyncio.Lock()

    @classmethod
    def from_metadata(
        cls,
        metadata: MetaData,
        checks: Optional[Mapping[str, Tuple[str, Check]]] = None,
    ) -> "InMemoryStorage":
        """
        Mirror the key and uniqueness constraints of SQLAlchemy metadata.

        Check constraints are SQL text, so they are passed in separately as
        ``{name: (table, predicate)}``.
        """
        schema: Dict[str, TableLayout] = {}
        for table in metadata.tables.values():
            layout = TableLayout(primary_key=tuple(c.name for c in table.primary_key.columns))
            for constraint in table.constraints:
                if isinstance(constraint, PrimaryKeyConstraint):
                    layout.primary_key_name = constraint.name or f"{table.name}_pkey"
                elif isinstance(constraint, UniqueConstraint) and constraint.name:
                    layout.unique[constraint.name] = tuple(c.name for c in constraint.columns)
            for column in table.columns:
                for fk in column.foreign_keys:
                    layout.foreign_keys[column.name] = (fk.column.table.name, fk.column.name)
            schema[table.name] = layout
        for name, (table_name, predicate) in (checks or {}).items():
            schema[table_name].checks[name] = predicate
        return cls(schema)

    # Synchronous helpers for seeding and inspecting state in tests

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        candidate = dict(row)
        self._validate(table, candidate)
        self.tables[table].append(candidate)
        return candidate

    def rows(self, table: str, **key: Any) -> List[Row]:
        return [dict(row) for row in self.tables[table] if self._matches(row, key)]

    # Internals shared with transactions

    def _layout(self, table: str) -> TableLayout:
        try:
            return self.schema[table]
        except KeyError:
            raise StorageError(f"unknown table {table!r}") from None

    def _matches(self, row: Mapping[str, Any], key: Mapping[str, Any]) -> bool:
        for column, value in key.items():
            if isinstance(value, RowLookup):
                candidates = {
                    parent[value.column]
                    for parent in self.tables[value.table]
                    if self._matches(parent, value.key)
                }
                if row.get(column) not in candidates:
                    return False
            elif row.get(column) != value:
                return False
        return True

    def _validate(self, table: str, candidate: Row, replacing: Optional[Row] = None) -> None:
        layout = self._layout(table)
        for name, predicate in layout.checks.items():
            if not predicate(candidate):
                raise ConstraintViolation(name=name, kind="check")
        for column, (parent_table, parent_column) in layout.foreign_keys.items():
            value = candidate.get(column)
            if value is not None and not any(
                parent[parent_column] == value for parent in self.tables[parent_table]
            ):
                raise ConstraintViolation(name=None, kind="foreign_key")
        keys = [(layout.primary_key_name, layout.primary_key)] + list(layout.unique.items())
        for name, columns in keys:
            if not columns:
                continue
            for row in self.tables[table]:
                if row is replacing:
                    continue
                if all(row.get(c) == candidate.get(c) for c in columns):
                    raise ConstraintViolation(name=name, kind="unique")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["InMemoryTransaction"]:
        async with self._lock:
            snapshot = copy.deepcopy(self.tables)
            try:
                yield InMemoryTransaction(self)
            except BaseException:
                self.tables = snapshot
                raise


class InMemoryTransaction(StorageTransaction):
    """Operations against an InMemoryStorage while its lock is held."""

    def __init__(self, storage: InMemoryStorage):
        self.storage = storage

    async def _round_trip(self) -> None:
        # every call is a suspension point, like a database round trip
        await asyncio.sleep(0)

    def _find(self, table: str, key: Mapping[str, Any]) -> List[Row]:
        self.storage._layout(table)
        return [row for row in self.storage.tables[table] if self.storage._matches(row, key)]

    async def resolve(self, lookup: RowLookup, lock: bool = False) -> Optional[Any]:
        await self._round_trip()
        rows = self._find(lookup.table, lookup.key)
        return rows[0][lookup.column] if rows else None

    async def lock_owned(self, ref: ResourceRef) -> Optional[LockedRow]:
        await self._round_trip()
        rows = self._find(ref.table, ref.key)
        if not rows:
            return None
        row = rows[0]
        return LockedRow(id=row[ref.id_column], owner_id=row[ref.owner_column], values=dict(row))

    async def delete_owned(self, ref: ResourceRef, actor_id: Any) -> MutationProbe:
        await self._round_trip()
        rows = self._find(ref.table, ref.key)
        owned = [row for row in rows if row[ref.owner_column] == actor_id]
        for row in owned:
            self.storage.tables[ref.table].remove(row)
        return MutationProbe(existed=bool(rows), applied=bool(owned))

    async def update_row(self, table: str, row_id: Any, values: Mapping[str, Any],
                         id_column: str = "id") -> Mapping[str, Any]:
        await self._round_trip()
        rows = self._find(table, {id_column: row_id})
        if not rows:
            raise StorageError(f"{table} row {row_id!r} vanished while locked")
        current = rows[0]
        candidate = {**current, **values}
        self.storage._validate(table, candidate, replacing=current)
        current.update(values)
        return dict(current)

    async def insert_edge(self, edge: EdgeRef) -> None:
        await self._round_trip()
        candidate = {edge.subject_column: edge.subject, edge.object_column: edge.object}
        try:
            self.storage._validate(edge.table, candidate)
        except ConstraintViolation as violation:
            if violation.kind == "unique":
                return
            raise
        self.storage.tables[edge.table].append(candidate)

    async def delete_edge(self, edge: EdgeRef) -> None:
        await self._round_trip()
        key = {edge.subject_column: edge.subject, edge.object_column: edge.object}
        for row in self._find(edge.table, key):
            self.storage.tables[edge.table].remove(row)
