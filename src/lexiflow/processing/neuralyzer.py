"""
Rule-based entity post-processing.

A Neuralyzer corrects the output of the stage chain after it has run: it can
make the pipeline forget entity labels on given surface forms, or force
labels onto them. Pipelines keep at most one neuralyzer per language plus one
for the wildcard language; the wildcard one runs first.

Example:
    >>> neuralyzer = Neuralyzer(Language.ENGLISH)
    >>> neuralyzer.teach_forget_pattern("Organization", "Apple")
    >>> neuralyzer.teach_add_pattern("Location", "New York")
    >>> pipeline.use_neuralyzer(neuralyzer)
"""

from dataclasses import dataclass
from typing import List, Tuple

from lexiflow.documents.document import Document, EntityType, Span
from lexiflow.documents.language import Language
from lexiflow.processing.base import Process


@dataclass(frozen=True)
class _Rule:
    entity_type: str
    words: Tuple[str, ...]
    ignore_case: bool


class Neuralyzer(Process):
    """Applies forget/add entity rules to processed documents."""

    def __init__(self, language: Language = Language.ANY, version: int = 0, tag: str = ""):
        super().__init__(language, version, tag)
        self._forget: List[_Rule] = []
        self._add: List[_Rule] = []

    def teach_forget_pattern(self, entity_type: str, phrase: str, ignore_case: bool = True) -> None:
        """Remove entity_type labels from every occurrence of phrase."""
        self._forget = self._forget + [_Rule(entity_type, tuple(phrase.split()), ignore_case)]

    def teach_add_pattern(self, entity_type: str, phrase: str, ignore_case: bool = False) -> None:
        """Label every occurrence of phrase as entity_type."""
        self._add = self._add + [_Rule(entity_type, tuple(phrase.split()), ignore_case)]

    @property
    def rules_count(self) -> int:
        return len(self._forget) + len(self._add)

    def process(self, document: Document) -> None:
        forget, add = self._forget, self._add
        for span in document.spans:
            for rule in forget:
                for start in self._matches(span, rule):
                    for token in span.tokens[start : start + len(rule.words)]:
                        token.remove_entity_type(rule.entity_type)
            for rule in add:
                for start in self._matches(span, rule):
                    self._label(span, start, rule)

    @staticmethod
    def _matches(span: Span, rule: _Rule) -> List[int]:
        size = len(rule.words)
        if size == 0:
            return []
        expected = [w.lower() for w in rule.words] if rule.ignore_case else list(rule.words)
        found = []
        for start in range(len(span.tokens) - size + 1):
            window = [t.value for t in span.tokens[start : start + size]]
            if rule.ignore_case:
                window = [w.lower() for w in window]
            if window == expected:
                found.append(start)
        return found

    @staticmethod
    def _label(span: Span, start: int, rule: _Rule) -> None:
        size = len(rule.words)
        for offset, token in enumerate(span.tokens[start : start + size]):
            if size == 1:
                tag = "S"
            elif offset == 0:
                tag = "B"
            elif offset == size - 1:
                tag = "E"
            else:
                tag = "I"
            token.remove_entity_type(rule.entity_type)
            token.add_entity_type(EntityType(rule.entity_type, tag))
