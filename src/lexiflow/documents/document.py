"""
Annotated document data structures.

A Document carries raw text, a language tag and the annotations written by
pipeline stages: an ordered list of spans (sentence-equivalent units), each
holding an ordered list of tokens, and entity labels attached to tokens.
Stages mutate documents in place; the pipeline never keeps a reference to a
document after a call returns.

Classes:
    EntityType: Entity label attached to a token
    Token: A single token with character offsets
    Span: A sentence-equivalent run of tokens
    Document: The language-tagged annotated text

Example:
    >>> from lexiflow.documents import Document, Language
    >>> doc = Document("Hello world. Bye.", Language.ENGLISH)
    >>> span = doc.add_span(0, len(doc))
    >>> span.add_token(0, 5, "Hello")
    >>> print(doc.tokens_count, doc.spans_count)
    1 1
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional
from uuid import uuid4

from lexiflow.core.exceptions.custom_exceptions import InvalidOperationError
from lexiflow.documents.language import Language


@dataclass
class EntityType:
    """
    Entity label attached to a token.

    Attributes:
        type (str): Entity type name, e.g. "Person" or "Location"
        tag (str): Position tag within a multi-token entity
            ("S" single, "B" begin, "I" inside, "E" end)
    """

    type: str
    tag: str = "S"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "tag": self.tag}


@dataclass
class Token:
    """
    A single token.

    Attributes:
        begin (int): Offset of the first character in the document text
        end (int): Offset one past the last character
        value (str): Surface form of the token
        pos (str): Part-of-speech tag, "X" until a tagger runs
        entity_types (List[EntityType]): Entity labels for this token
    """

    begin: int
    end: int
    value: str
    pos: str = "X"
    entity_types: List[EntityType] = field(default_factory=list)

    def __len__(self) -> int:
        return self.end - self.begin

    def add_entity_type(self, entity_type: EntityType) -> None:
        self.entity_types.append(entity_type)

    def remove_entity_type(self, type_name: str) -> bool:
        """Remove every label of the given type; True if any was removed."""
        before = len(self.entity_types)
        self.entity_types = [e for e in self.entity_types if e.type != type_name]
        return len(self.entity_types) != before

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "begin": self.begin,
            "end": self.end,
            "value": self.value,
            "pos": self.pos,
        }
        if self.entity_types:
            data["entities"] = [e.to_dict() for e in self.entity_types]
        return data


@dataclass
class Span:
    """A sentence-equivalent run of tokens between two character offsets."""

    begin: int
    end: int
    tokens: List[Token] = field(default_factory=list)

    def add_token(self, begin: int, end: int, value: str) -> Token:
        token = Token(begin=begin, end=end, value=value)
        self.tokens.append(token)
        return token

    def __len__(self) -> int:
        return len(self.tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "begin": self.begin,
            "end": self.end,
            "tokens": [t.to_dict() for t in self.tokens],
        }


class Document:
    """
    Language-tagged annotated text, mutated in place by pipeline stages.

    The language can be assigned once if the document was created with the
    wildcard language; after that it is fixed. The length of a document is
    the length of its text; zero-length documents are never dispatched to
    any stage.

    Attributes:
        text (str): Raw document text
        spans (List[Span]): Ordered sentence-equivalent spans
        document_id (str): Unique identifier (auto-generated UUID)
        metadata (Dict[str, Any]): Free-form caller metadata

    Example:
        >>> doc = Document("Bonjour")
        >>> doc.language = Language.FRENCH   # allowed, was ANY
        >>> doc.language = Language.ENGLISH  # raises InvalidOperationError
    """

    def __init__(
        self,
        text: str,
        language: Language = Language.ANY,
        document_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.text = text or ""
        self._language = Language.parse(language)
        self.spans: List[Span] = []
        self.document_id = document_id or str(uuid4())
        self.metadata: Dict[str, Any] = metadata or {}

    @property
    def language(self) -> Language:
        return self._language

    @language.setter
    def language(self, value: Language) -> None:
        value = Language.parse(value)
        if value is self._language:
            return
        if self._language is not Language.ANY:
            raise InvalidOperationError(
                "Document language is already set",
                error_code="DOCUMENT_LANGUAGE_FIXED",
                details={"current": self._language.value, "requested": value.value},
            )
        self._language = value

    def __len__(self) -> int:
        return len(self.text)

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def spans_count(self) -> int:
        return len(self.spans)

    @property
    def tokens_count(self) -> int:
        return sum(len(span.tokens) for span in self.spans)

    @property
    def entities_count(self) -> int:
        return sum(len(token.entity_types) for token in self.tokens)

    @property
    def tokens(self) -> Iterator[Token]:
        """Iterate every token of every span in document order."""
        for span in self.spans:
            yield from span.tokens

    def add_span(self, begin: int, end: int) -> Span:
        span = Span(begin=begin, end=end)
        self.spans.append(span)
        return span

    def span_text(self, span: Span) -> str:
        return self.text[span.begin : span.end]

    def clear(self) -> None:
        """Drop every annotation, keeping text and language."""
        self.spans = []

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the document to a JSON-serializable dictionary.

        Returns:
            Dict[str, Any]: id, language, text, spans (with tokens) and metadata
        """
        return {
            "document_id": self.document_id,
            "language": self._language.value,
            "text": self.text,
            "spans": [s.to_dict() for s in self.spans],
            "metadata": self.metadata,
        }

    def __repr__(self) -> str:
        preview = self.text[:30] + ("..." if len(self.text) > 30 else "")
        return (
            f"Document(language={self._language.value!r}, text={preview!r}, "
            f"spans={self.spans_count}, tokens={self.tokens_count})"
        )
