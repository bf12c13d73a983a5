"""
Base classes for pipeline stages.

Every stage of a pipeline is a Process: it carries a versioned identity
(language, kind, tag, version) and mutates a Document in place. The optional
capabilities a stage can opt into are expressed as abstract subclasses and
mixins, probed with isinstance() by the pipeline:

Classes:
    Process: Core stage interface, implemented by every stage
    Tokenizer: Splits document text into tokens
    SentenceDetector: Splits documents into sentence-equivalent spans
    Tagger: Assigns part-of-speech tags
    EntityRecognizer: Labels entities; reports the types it produces
    HasSpecialCases: Mixin for stages that export tokenization special cases

Example:
    >>> class Lowercaser(Process):
    ...     def process(self, document):
    ...         for token in document.tokens:
    ...             token.value = token.value.lower()
    >>> stage = Lowercaser(Language.ENGLISH, version=1, tag="lower")
    >>> stage.descriptor
    ModelDescriptor(language=<Language.ENGLISH: 'en'>, kind='Lowercaser', tag='lower', version=1)
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, List

from lexiflow.documents.document import Document
from lexiflow.documents.language import Language
from lexiflow.models.descriptor import ModelDescriptor

if TYPE_CHECKING:
    from lexiflow.processing.tokenizer import TokenizationException


class Process(ABC):
    """
    Abstract base class for all pipeline stages.

    Attributes:
        language (Language): Language the stage applies to (ANY for all)
        version (int): Model version
        tag (str): Model variant tag

    Subclasses must implement process(). The kind defaults to the class
    name, which is what a store keys persisted stage models by.
    """

    def __init__(self, language: Language = Language.ANY, version: int = 0, tag: str = ""):
        self.language = Language.parse(language)
        self.version = version
        self.tag = tag

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def descriptor(self) -> ModelDescriptor:
        return ModelDescriptor(
            language=self.language, kind=self.kind, tag=self.tag, version=self.version
        )

    @abstractmethod
    def process(self, document: Document) -> None:
        """
        Annotate the document in place.

        Args:
            document (Document): Non-empty document whose language matches
                this stage (or either side is the wildcard)
        """
        pass

    def __call__(self, document: Document) -> Document:
        self.process(document)
        return document

    def __repr__(self) -> str:
        return (
            f"{self.kind}(language={self.language.value!r}, "
            f"version={self.version}, tag={self.tag!r})"
        )


class HasSpecialCases(ABC):
    """
    Mixin for stages that carry tokenization special cases.

    When such a stage is added to a pipeline, its special cases are imported
    into the pipeline's tokenizers.
    """

    @abstractmethod
    def get_special_cases(self) -> Dict[str, "TokenizationException"]:
        """Map of surface form to the tokens it must be split into."""
        pass


class Tokenizer(Process):
    """
    Stage that splits document text into tokens.

    Tokenizers accept special cases: surface forms that must be tokenized
    in a fixed way regardless of the general rules.
    """

    @abstractmethod
    def add_special_case(self, word: str, exception: "TokenizationException") -> None:
        pass

    def import_special_cases(self, source: HasSpecialCases) -> None:
        for word, exception in source.get_special_cases().items():
            self.add_special_case(word, exception)


class SentenceDetector(Process):
    """Stage that splits documents into sentence-equivalent spans."""


class Tagger(Process):
    """Stage that assigns part-of-speech tags to tokens."""


class EntityRecognizer(Process):
    """Stage that attaches entity labels to tokens."""

    @abstractmethod
    def produces(self) -> List[str]:
        """Entity types this recognizer can emit."""
        pass
