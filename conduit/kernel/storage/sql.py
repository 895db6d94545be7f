"""
SQLAlchemy implementation of the storage contract.

PostgreSQL is the production engine: deletes run as a single statement (a
data-modifying CTE plus two EXISTS checks, all evaluated against the same
snapshot) and locked reads use ``SELECT ... FOR UPDATE``.

SQLite has no row locks and no DML in CTEs, but it serializes writers on a
database-wide lock. Every operation there therefore starts with a write so
the lock is held before anything is read.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Mapping, Optional

from sqlalchemy import MetaData, Table, delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.kernel.errors import InternalError
from conduit.kernel.storage.base import (
    EdgeRef,
    LockedRow,
    MutationProbe,
    ResourceRef,
    RowLookup,
    StorageEngine,
    StorageError,
    StorageTransaction,
)
from conduit.kernel.storage.constraints import violation_from

_IDEMPOTENT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class SqlTransaction(StorageTransaction):
    """Storage operations issued through an AsyncSession."""

    def __init__(self, session: AsyncSession, metadata: MetaData):
        self.session = session
        self.metadata = metadata

    @property
    def dialect(self) -> str:
        return self.session.get_bind().dialect.name

    def _table(self, name: str) -> Table:
        try:
            return self.metadata.tables[name]
        except KeyError:
            raise StorageError(f"unknown table {name!r}") from None

    def _criteria(self, table: Table, key: Mapping[str, Any]) -> List[Any]:
        clauses = []
        for column, value in key.items():
            if isinstance(value, RowLookup):
                parent = self._table(value.table)
                clauses.append(table.c[column].in_(
                    select(parent.c[value.column]).where(*self._criteria(parent, value.key))
                ))
            else:
                clauses.append(table.c[column] == value)
        return clauses

    async def _execute(self, stmt):
        try:
            return await self.session.execute(stmt)
        except IntegrityError as exc:
            raise violation_from(exc) from exc

    async def resolve(self, lookup: RowLookup, lock: bool = False) -> Optional[Any]:
        table = self._table(lookup.table)
        stmt = select(table.c[lookup.column]).where(*self._criteria(table, lookup.key))
        if lock:
            # FOR SHARE; the SQLite compiler drops the clause
            stmt = stmt.with_for_update(read=True)
        result = await self._execute(stmt)
        return result.scalar_one_or_none()

    async def lock_owned(self, ref: ResourceRef) -> Optional[LockedRow]:
        table = self._table(ref.table)
        criteria = self._criteria(table, ref.key)
        if self.dialect == "sqlite":
            # self-assignment that leaves timestamps alone but takes the write lock
            touch = {
                column.name: column
                for column in table.c
                if column.primary_key or column.onupdate is not None
            }
            stmt = update(table).where(*criteria).values(touch).returning(*table.c)
        else:
            stmt = select(table).where(*criteria).with_for_update()

        row = (await self._execute(stmt)).mappings().one_or_none()
        if row is None:
            return None
        return LockedRow(id=row[ref.id_column], owner_id=row[ref.owner_column], values=dict(row))

    def owned_delete_statement(self, ref: ResourceRef, actor_id: Any):
        """
        The single-statement delete used on PostgreSQL.

        Both checks are evaluated together with the delete. ``existed`` only
        reports a row owned by someone else, so an owner whose concurrent
        delete lost the race sees NotFound.
        """
        table = self._table(ref.table)
        criteria = self._criteria(table, ref.key)
        owner = table.c[ref.owner_column]
        key_column = table.c[ref.id_column]

        deleted = delete(table).where(*criteria, owner == actor_id).returning(key_column).cte("deleted")
        return select(
            select(key_column).where(*criteria, owner != actor_id).exists().label("existed"),
            select(deleted.c[ref.id_column]).exists().label("applied"),
        )

    async def delete_owned(self, ref: ResourceRef, actor_id: Any) -> MutationProbe:
        if self.dialect == "postgresql":
            probe = (await self._execute(self.owned_delete_statement(ref, actor_id))).one()
            return MutationProbe(existed=bool(probe.existed), applied=bool(probe.applied))

        table = self._table(ref.table)
        criteria = self._criteria(table, ref.key)
        owned = table.c[ref.owner_column] == actor_id
        key_column = table.c[ref.id_column]

        result = await self._execute(delete(table).where(*criteria, owned))
        if result.rowcount:
            return MutationProbe(existed=True, applied=True)
        # the DELETE above already holds the write lock for this transaction
        existed = (await self._execute(select(select(key_column).where(*criteria).exists()))).scalar()
        return MutationProbe(existed=bool(existed), applied=False)

    async def update_row(self, table: str, row_id: Any, values: Mapping[str, Any],
                         id_column: str = "id") -> Mapping[str, Any]:
        target = self._table(table)
        stmt = (
            update(target)
            .where(target.c[id_column] == row_id)
            .values(dict(values))
            .returning(*target.c)
        )
        row = (await self._execute(stmt)).mappings().one()
        return dict(row)

    def _edge_criteria(self, table: Table, edge: EdgeRef) -> List[Any]:
        return [
            table.c[edge.subject_column] == edge.subject,
            table.c[edge.object_column] == edge.object,
        ]

    async def insert_edge(self, edge: EdgeRef) -> None:
        table = self._table(edge.table)
        insert = _IDEMPOTENT_INSERTS.get(self.dialect)
        if insert is None:
            raise StorageError(f"idempotent insert not supported on {self.dialect}")
        stmt = insert(table).values({
            edge.subject_column: edge.subject,
            edge.object_column: edge.object,
        }).on_conflict_do_nothing()
        await self._execute(stmt)

    async def delete_edge(self, edge: EdgeRef) -> None:
        table = self._table(edge.table)
        await self._execute(delete(table).where(*self._edge_criteria(table, edge)))


class SqlStorage(StorageEngine):
    """
    Storage engine bound to one AsyncSession.

    If the session already has a transaction open (the request's unit of
    work), operations join it and committing is left to its owner.
    Otherwise a transaction is started and committed here.
    """

    def __init__(self, session: AsyncSession, metadata: Optional[MetaData] = None):
        if metadata is None:
            from conduit.kernel.models import Base

            metadata = Base.metadata
        self.session = session
        self.metadata = metadata

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SqlTransaction]:
        tx = SqlTransaction(self.session, self.metadata)
        if self.session.in_transaction():
            yield tx
            return
        try:
            async with self.session.begin():
                yield tx
        except SQLAlchemyError as exc:
            # constraint failures already surfaced as ConstraintViolation
            raise InternalError() from exc
