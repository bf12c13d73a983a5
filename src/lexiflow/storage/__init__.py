"""
LexiFlow Storage Module - persisted model artifacts.

Stores:
    - ModelStore: Abstract contract consumed by pipelines
    - InMemoryModelStore: Process-local store, used in tests and tooling
    - DiskModelStore: Pickle-per-file store under MODEL_STORE_PATH

Pipelines that are not handed a store explicitly use the default store,
a DiskModelStore rooted at MODEL_STORE_PATH unless replaced with
set_default_store().

Example:
    >>> from lexiflow.storage import InMemoryModelStore, set_default_store
    >>> set_default_store(InMemoryModelStore())
"""

import threading
from typing import Optional

from .base import ModelStore
from .disk import DiskModelStore
from .memory import InMemoryModelStore

_default_store: Optional[ModelStore] = None
_default_store_lock = threading.Lock()


def get_default_store() -> ModelStore:
    """Return the process-wide default store, creating it on first use."""
    global _default_store
    with _default_store_lock:
        if _default_store is None:
            _default_store = DiskModelStore()
        return _default_store


def set_default_store(store: Optional[ModelStore]) -> None:
    """Replace the default store; None resets it to the on-disk store."""
    global _default_store
    with _default_store_lock:
        _default_store = store


__all__ = [
    "DiskModelStore",
    "InMemoryModelStore",
    "ModelStore",
    "get_default_store",
    "set_default_store",
]
