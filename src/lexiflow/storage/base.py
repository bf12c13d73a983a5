"""
Model store contract.

A ModelStore persists and loads stage models and pipeline records keyed by
ModelDescriptor. Pipelines only rely on the three operations below, plus
version resolution: a descriptor carrying LATEST_VERSION resolves to the
highest version the store holds for that family.

Contract:
    exists(descriptor) -> bool
    load(descriptor) -> object, raising ModelNotFoundError when the artifact
        is missing (including when it vanished after an exists() check)
    save(descriptor, obj)
"""

from abc import ABC, abstractmethod
from typing import Any, List

from lexiflow.core.exceptions.custom_exceptions import ModelNotFoundError
from lexiflow.models.descriptor import ModelDescriptor


class ModelStore(ABC):
    """Abstract base class for model stores."""

    @abstractmethod
    def list_versions(self, descriptor: ModelDescriptor) -> List[int]:
        """Versions stored for the descriptor's family, ascending."""
        pass

    @abstractmethod
    def _exists_exact(self, descriptor: ModelDescriptor) -> bool:
        pass

    @abstractmethod
    def _load_exact(self, descriptor: ModelDescriptor) -> Any:
        pass

    @abstractmethod
    def save(self, descriptor: ModelDescriptor, obj: Any) -> None:
        """Persist obj under the descriptor, overwriting any previous value."""
        pass

    def resolve(self, descriptor: ModelDescriptor) -> ModelDescriptor:
        """
        Pin LATEST_VERSION to a concrete version.

        Raises:
            ModelNotFoundError: If the latest version is requested and the
                family has no stored version
        """
        if not descriptor.is_latest:
            return descriptor
        versions = self.list_versions(descriptor)
        if not versions:
            raise ModelNotFoundError(
                f"No stored version of {descriptor.without_version()}",
                error_code="MODEL_NOT_FOUND",
                details={"model": descriptor.without_version()},
            )
        return descriptor.with_version(max(versions))

    def exists(self, descriptor: ModelDescriptor) -> bool:
        if descriptor.is_latest:
            return bool(self.list_versions(descriptor))
        return self._exists_exact(descriptor)

    def load(self, descriptor: ModelDescriptor) -> Any:
        """
        Load the object stored under the descriptor.

        Raises:
            ModelNotFoundError: If nothing is stored under the descriptor
        """
        return self._load_exact(self.resolve(descriptor))

    @staticmethod
    def _not_found(descriptor: ModelDescriptor) -> ModelNotFoundError:
        return ModelNotFoundError(
            f"Model not found in store: {descriptor}",
            error_code="MODEL_NOT_FOUND",
            details=descriptor.to_dict(),
        )
