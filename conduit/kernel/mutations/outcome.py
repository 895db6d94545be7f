"""
Tri-state result of an ownership-gated mutation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from conduit.kernel.errors import ForbiddenError, NotFoundError
from conduit.kernel.storage.base import MutationProbe

T = TypeVar("T")


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class MutationOutcome(Generic[T]):
    """What happened to the addressed resource, and the effect's value on success."""

    kind: OutcomeKind
    value: Optional[T] = None

    @classmethod
    def classify(cls, probe: MutationProbe, value: Optional[T] = None) -> "MutationOutcome[T]":
        """
        Build the outcome from facts observed in one atomic unit.

        An applied effect implies the resource existed, so ``applied`` is
        checked first and the three cases cover every probe.
        """
        if probe.applied:
            return cls(OutcomeKind.SUCCESS, value)
        if probe.existed:
            return cls(OutcomeKind.FORBIDDEN)
        return cls(OutcomeKind.NOT_FOUND)

    @property
    def succeeded(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def unwrap(self) -> Optional[T]:
        """Return the value, or raise the error matching the outcome."""
        if self.kind is OutcomeKind.SUCCESS:
            return self.value
        if self.kind is OutcomeKind.FORBIDDEN:
            raise ForbiddenError()
        raise NotFoundError()
