"""
Conditional Mutation Executor

Runs an ownership-gated write so that "did the resource exist" and "did
the write happen" are answered from the same snapshot. Callers never check
existence or ownership themselves before mutating; doing so would leave a
window in which the answer can change.
"""

from typing import Any, Awaitable, Callable, Mapping, Optional, Tuple

from conduit.kernel.mutations.outcome import MutationOutcome
from conduit.kernel.storage.base import (
    LockedRow,
    MutationProbe,
    ResourceRef,
    StorageEngine,
    StorageTransaction,
)
from conduit.kernel.storage.constraints import on_constraint
from conduit.logging_config import get_logger

logger = get_logger(__name__)

Effect = Callable[[StorageTransaction, ResourceRef, Any], Awaitable[MutationProbe]]
Derive = Callable[[LockedRow], Mapping[str, Any]]


async def delete_effect(tx: StorageTransaction, ref: ResourceRef, actor_id: Any) -> MutationProbe:
    """Delete the row if the actor owns it."""
    return await tx.delete_owned(ref, actor_id)


class UpdateEffect:
    """
    Lock the row, check ownership, derive new values, write them.

    ``derive`` sees the locked row, so values computed from it (or from the
    request) cannot be invalidated by a concurrent writer before the update
    lands. An empty result leaves the row untouched.

    A constraint message may name a derived column as ``{column}``; it is
    filled in from the values actually written.
    """

    def __init__(self, derive: Derive, constraints: Optional[Mapping[str, Tuple[str, str]]] = None):
        self.derive = derive
        self.constraints = dict(constraints or {})

    async def __call__(self, tx: StorageTransaction, ref: ResourceRef, actor_id: Any) -> MutationProbe:
        locked = await tx.lock_owned(ref)
        if locked is None:
            return MutationProbe(existed=False, applied=False)
        if locked.owner_id != actor_id:
            return MutationProbe(existed=True, applied=False)

        values = self.derive(locked)
        if not values:
            return MutationProbe(existed=True, applied=True, row=locked.values)

        fields = {
            name: (field, message.format_map(values) if field in values else message)
            for name, (field, message) in self.constraints.items()
        }
        row = await on_constraint(
            lambda: tx.update_row(ref.table, locked.id, values, id_column=ref.id_column),
            fields,
        )
        return MutationProbe(existed=True, applied=True, row=row)


class ConditionalMutationExecutor:
    """Executes ownership-gated writes against a storage engine."""

    def __init__(self, storage: StorageEngine):
        self.storage = storage

    async def mutate(self, ref: ResourceRef, actor_id: Any, effect: Effect) -> MutationOutcome:
        """
        Run ``effect`` in one transaction and classify what it observed.

        Errors raised by the effect (constraint violations included) roll
        the transaction back and propagate.
        """
        async with self.storage.transaction() as tx:
            probe = await effect(tx, ref, actor_id)

        outcome = MutationOutcome.classify(probe, probe.row)
        logger.debug(
            "Mutation on %s %s by %s: %s",
            ref.table,
            dict(ref.key),
            actor_id,
            outcome.kind.value,
        )
        return outcome

    async def delete(self, ref: ResourceRef, actor_id: Any) -> MutationOutcome[None]:
        return await self.mutate(ref, actor_id, delete_effect)

    async def update(
        self,
        ref: ResourceRef,
        actor_id: Any,
        derive: Derive,
        constraints: Optional[Mapping[str, Tuple[str, str]]] = None,
    ) -> MutationOutcome[Mapping[str, Any]]:
        return await self.mutate(ref, actor_id, UpdateEffect(derive, constraints))
