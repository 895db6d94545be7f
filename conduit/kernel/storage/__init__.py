"""
Storage engines behind the mutation protocol.
"""

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
from conduit.kernel.storage.memory import InMemoryStorage, TableLayout
from conduit.kernel.storage.sql import SqlStorage, SqlTransaction

__all__ = [
    "ConstraintViolation",
    "EdgeRef",
    "LockedRow",
    "MutationProbe",
    "ResourceRef",
    "RowLookup",
    "StorageEngine",
    "StorageError",
    "StorageTransaction",
    "InMemoryStorage",
    "TableLayout",
    "SqlStorage",
    "SqlTransaction",
]
