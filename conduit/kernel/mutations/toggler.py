"""
Idempotent add/remove of association edges (favorites, follows).
"""

from dataclasses import dataclass, replace
from typing import Any

from conduit.kernel.errors import ForbiddenError, NotFoundError
from conduit.kernel.storage.base import (
    ConstraintViolation,
    EdgeRef,
    RowLookup,
    StorageEngine,
    StorageTransaction,
)
from conduit.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class EdgeState:
    """The resolved endpoints of an edge and whether it exists now."""

    subject: Any
    object: Any
    exists: bool


class AssociationToggler:
    """
    Sets an edge present or absent.

    Both directions are idempotent: adding an existing edge and removing a
    missing one succeed without changing anything. Concurrent toggles of the
    same pair serialize in the database; the last to commit wins and the
    pair never appears twice.
    """

    def __init__(self, storage: StorageEngine):
        self.storage = storage

    async def _resolve(self, tx: StorageTransaction, edge: EdgeRef) -> EdgeRef:
        if not isinstance(edge.object, RowLookup):
            return edge
        object_id = await tx.resolve(edge.object, lock=True)
        if object_id is None:
            raise NotFoundError()
        return replace(edge, object=object_id)

    async def add(self, edge: EdgeRef) -> EdgeState:
        async with self.storage.transaction() as tx:
            resolved = await self._resolve(tx, edge)
            try:
                await tx.insert_edge(resolved)
            except ConstraintViolation as violation:
                if violation.name in edge.forbidden_on:
                    raise ForbiddenError() from violation
                if violation.kind == "foreign_key":
                    # an endpoint was deleted after it was resolved
                    raise NotFoundError() from violation
                raise

        logger.debug("Edge %s %s -> %s present", edge.table, resolved.subject, resolved.object)
        return EdgeState(subject=resolved.subject, object=resolved.object, exists=True)

    async def remove(self, edge: EdgeRef) -> EdgeState:
        async with self.storage.transaction() as tx:
            resolved = await self._resolve(tx, edge)
            await tx.delete_edge(resolved)

        logger.debug("Edge %s %s -> %s absent", edge.table, resolved.subject, resolved.object)
        return EdgeState(subject=resolved.subject, object=resolved.object, exists=False)
