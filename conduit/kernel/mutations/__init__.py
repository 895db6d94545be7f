"""
Ownership-gated writes and idempotent edge toggles.
"""

from conduit.kernel.mutations.executor import ConditionalMutationExecutor, UpdateEffect, delete_effect
from conduit.kernel.mutations.outcome import MutationOutcome, OutcomeKind
from conduit.kernel.mutations.toggler import AssociationToggler, EdgeState

__all__ = [
    "ConditionalMutationExecutor",
    "UpdateEffect",
    "delete_effect",
    "MutationOutcome",
    "OutcomeKind",
    "AssociationToggler",
    "EdgeState",
]
