"""
In-process model store.

Objects are deep-copied on save and on load, so every pipeline that loads
a model gets its own instance and no stage is shared between pipelines.
"""

import copy
import threading
from typing import Any, Dict, List, Tuple

from lexiflow.models.descriptor import ModelDescriptor
from lexiflow.storage.base import ModelStore


class InMemoryModelStore(ModelStore):
    """Thread-safe dictionary-backed store."""

    def __init__(self):
        self._objects: Dict[Tuple[Any, int], Any] = {}
        self._lock = threading.Lock()

    def list_versions(self, descriptor: ModelDescriptor) -> List[int]:
        with self._lock:
            return sorted(
                version
                for (family, version) in self._objects
                if family == descriptor.family
            )

    def _exists_exact(self, descriptor: ModelDescriptor) -> bool:
        with self._lock:
            return (descriptor.family, descriptor.version) in self._objects

    def _load_exact(self, descriptor: ModelDescriptor) -> Any:
        with self._lock:
            try:
                obj = self._objects[(descriptor.family, descriptor.version)]
            except KeyError:
                raise self._not_found(descriptor) from None
        return copy.deepcopy(obj)

    def save(self, descriptor: ModelDescriptor, obj: Any) -> None:
        stored = copy.deepcopy(obj)
        with self._lock:
            self._objects[(descriptor.family, descriptor.version)] = stored

    def delete(self, descriptor: ModelDescriptor) -> bool:
        with self._lock:
            return self._objects.pop((descriptor.family, descriptor.version), None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)
