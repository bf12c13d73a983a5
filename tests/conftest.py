"""
Pytest configuration and fixtures for LexiFlow tests
"""

from typing import Dict, List

import pytest

from lexiflow.documents.document import Document, EntityType
from lexiflow.documents.language import Language
from lexiflow.processing.base import (
    EntityRecognizer,
    HasSpecialCases,
    Process,
    SentenceDetector,
    Tagger,
)
from lexiflow.processing.tokenizer import TokenizationException
from lexiflow.storage.memory import InMemoryModelStore


def trace(document: Document) -> List[str]:
    return document.metadata.setdefault("trace", [])


class RecordingStage(Process):
    """Appends '<kind>:<tag>:<version>' to the document trace."""

    def process(self, document: Document) -> None:
        trace(document).append(f"{self.kind}:{self.tag}:{self.version}")


class FailingStage(Process):
    """Raises for documents whose metadata asks for a failure."""

    def process(self, document: Document) -> None:
        if document.metadata.get("fail"):
            raise ValueError(f"cannot process {document.document_id}")
        trace(document).append("FailingStage:ok")


class FakeSentenceDetector(SentenceDetector):
    """Splits spans after '.' tokens."""

    def process(self, document: Document) -> None:
        trace(document).append(f"{self.kind}:{self.language.value}")
        tokens = list(document.tokens)
        if not tokens:
            return
        document.clear()
        span = None
        for token in tokens:
            if span is None:
                span = document.add_span(token.begin, token.end)
            span.tokens.append(token)
            span.end = token.end
            if token.value == ".":
                span = None


class FakeTagger(Tagger):
    def process(self, document: Document) -> None:
        trace(document).append(f"{self.kind}:{self.language.value}")
        for token in document.tokens:
            token.pos = "PUNCT" if not token.value.isalnum() else "NOUN"


class FakeEntityRecognizer(EntityRecognizer):
    """Labels capitalized tokens as Person."""

    def produces(self) -> List[str]:
        return ["Person"]

    def process(self, document: Document) -> None:
        trace(document).append(f"{self.kind}:{self.version}")
        for token in document.tokens:
            if token.value[:1].isupper():
                token.add_entity_type(EntityType("Person"))


class AbbreviationSource(Process, HasSpecialCases):
    """Carries special cases without annotating anything."""

    def __init__(self, language=Language.ANY, version=0, tag="", cases=None):
        super().__init__(language, version, tag)
        self.cases: Dict[str, TokenizationException] = cases or {}

    def get_special_cases(self) -> Dict[str, TokenizationException]:
        return dict(self.cases)

    def process(self, document: Document) -> None:
        pass


@pytest.fixture
def store() -> InMemoryModelStore:
    """Empty in-memory model store"""
    return InMemoryModelStore()


@pytest.fixture
def english_doc() -> Document:
    return Document("Marie Curie was born in Warsaw. She moved to Paris.", Language.ENGLISH)


@pytest.fixture
def french_doc() -> Document:
    return Document("Marie Curie est née à Varsovie.", Language.FRENCH)


@pytest.fixture
def make_documents():
    """Factory for numbered English documents"""

    def _make(count: int, fail_at=()) -> List[Document]:
        docs = []
        for i in range(count):
            doc = Document(f"Document number {i}.", Language.ENGLISH, document_id=str(i))
            if i in fail_at:
                doc.metadata["fail"] = True
            docs.append(doc)
        return docs

    return _make
