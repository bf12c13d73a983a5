"""
Versioned identities of persisted models.

A ModelDescriptor names a stored model by language, kind, tag and version.
Descriptors that agree on everything but the version belong to the same
family; a persisted pipeline keeps at most one descriptor per family.

Example:
    >>> d1 = ModelDescriptor(Language.ENGLISH, "AveragePerceptronTagger", "", 1)
    >>> d2 = d1.with_version(2)
    >>> d1.same_family(d2)
    True
    >>> d1.without_version()
    'AveragePerceptronTagger-en-'
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Tuple

from lexiflow.documents.language import Language

# Requests the highest version a store holds for a family.
LATEST_VERSION = -1


@dataclass(frozen=True)
class ModelDescriptor:
    """
    Immutable identity of a persisted model.

    Attributes:
        language (Language): Language the model applies to
        kind (str): Model kind, the stage class name by convention
        tag (str): Free-form variant tag ("" for the default variant)
        version (int): Model version, LATEST_VERSION to request the newest
    """

    language: Language
    kind: str
    tag: str = ""
    version: int = 0

    @property
    def family(self) -> Tuple[Language, str, str]:
        """Identity ignoring the version."""
        return (self.language, self.kind, self.tag)

    def same_family(self, other: "ModelDescriptor") -> bool:
        return self.family == other.family

    def without_version(self) -> str:
        return f"{self.kind}-{self.language.value}-{self.tag}"

    def with_version(self, version: int) -> "ModelDescriptor":
        return replace(self, version=version)

    @property
    def is_latest(self) -> bool:
        return self.version == LATEST_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language.value,
            "kind": self.kind,
            "tag": self.tag,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelDescriptor":
        return cls(
            language=Language.parse(data["language"]),
            kind=data["kind"],
            tag=data.get("tag", ""),
            version=int(data.get("version", 0)),
        )

    def __str__(self) -> str:
        return f"{self.without_version()}-v{self.version}"


@dataclass
class PipelineData:
    """Persisted state of a pipeline: the descriptors of its stages, in order."""

    processes: List[ModelDescriptor] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"processes": [p.to_dict() for p in self.processes]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineData":
        return cls(
            processes=[ModelDescriptor.from_dict(p) for p in data.get("processes", [])]
        )
