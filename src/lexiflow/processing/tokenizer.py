"""
Default rule-based tokenizer.

FastTokenizer splits text into word and punctuation tokens with a single
regular expression, honoring a table of special cases: surface forms that
are replaced by a fixed sequence of tokens (e.g. "can't" -> "ca", "n't").
It is the tokenizer a pipeline falls back to when none is configured or
when a stored pipeline has lost its tokenizer.

If the document has no spans yet, the whole text becomes one span;
otherwise each existing span is tokenized separately and previous tokens
of that span are replaced.

Example:
    >>> tokenizer = FastTokenizer(Language.ENGLISH)
    >>> tokenizer.add_special_case("can't", TokenizationException(["ca", "n't"]))
    >>> doc = Document("I can't go.", Language.ENGLISH)
    >>> tokenizer.process(doc)
    >>> [t.value for t in doc.tokens]
    ['I', 'ca', "n't", 'go', '.']
"""

import re
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from lexiflow.documents.document import Document, Span
from lexiflow.documents.language import Language
from lexiflow.processing.base import Tokenizer

_TOKEN_PATTERN = re.compile(r"\w+(?:[-']\w+)*|[^\w\s]", re.UNICODE)


@dataclass
class TokenizationException:
    """
    Fixed tokenization of a surface form.

    Attributes:
        replacements (List[str]): Tokens emitted instead of the surface form.
            When they concatenate back to the surface form, each token gets
            its own offsets; otherwise all share the offsets of the form.
    """

    replacements: List[str] = field(default_factory=list)


class FastTokenizer(Tokenizer):
    """Word/punctuation tokenizer with a special-case table."""

    def __init__(
        self,
        language: Language = Language.ANY,
        version: int = 0,
        tag: str = "",
        special_cases: Optional[Dict[str, TokenizationException]] = None,
    ):
        super().__init__(language, version, tag)
        self._special_cases: Dict[str, TokenizationException] = dict(special_cases or {})
        self._special_cases_lock = threading.Lock()

    def add_special_case(self, word: str, exception: TokenizationException) -> None:
        with self._special_cases_lock:
            # process() reads the table without locking; never mutate it in place
            updated = dict(self._special_cases)
            updated[word] = exception
            self._special_cases = updated

    def get_special_cases(self) -> Dict[str, TokenizationException]:
        return dict(self._special_cases)

    def __getstate__(self):
        state = self.__dict__.copy()
        del state["_special_cases_lock"]
        return state

    def __setstate__(self, state):
        self.__dict__.update(state)
        self._special_cases_lock = threading.Lock()

    def process(self, document: Document) -> None:
        if not document.spans:
            document.add_span(0, len(document))

        special_cases = self._special_cases
        for span in document.spans:
            span.tokens = []
            self._tokenize_span(document, span, special_cases)

    def _tokenize_span(
        self,
        document: Document,
        span: Span,
        special_cases: Dict[str, TokenizationException],
    ) -> None:
        text = document.text[span.begin : span.end]
        for match in _TOKEN_PATTERN.finditer(text):
            begin = span.begin + match.start()
            end = span.begin + match.end()
            value = match.group()

            exception = special_cases.get(value)
            if exception is None:
                span.add_token(begin, end, value)
                continue

            if "".join(exception.replacements) == value:
                offset = begin
                for piece in exception.replacements:
                    span.add_token(offset, offset + len(piece), piece)
                    offset += len(piece)
            else:
                for piece in exception.replacements:
                    span.add_token(begin, end, piece)
