"""
LexiFlow Processing Module - pipeline stage contracts and built-in stages.

Core Components:
    - Process: Interface every pipeline stage implements
    - Tokenizer, SentenceDetector, Tagger, EntityRecognizer: Stage capabilities
    - HasSpecialCases: Opt-in capability for exporting tokenization exceptions
    - FastTokenizer: Default rule-based tokenizer
    - Neuralyzer: Rule-based entity post-processor

Stages mutate documents in place. The statistical stages (sentence
detection, tagging, entity recognition) are loaded from a model store and
only need to satisfy the capability contracts defined in base.py.
"""

from .base import (
    EntityRecognizer,
    HasSpecialCases,
    Process,
    SentenceDetector,
    Tagger,
    Tokenizer,
)
from .neuralyzer import Neuralyzer
from .tokenizer import FastTokenizer, TokenizationException

__all__ = [
    "EntityRecognizer",
    "FastTokenizer",
    "HasSpecialCases",
    "Neuralyzer",
    "Process",
    "SentenceDetector",
    "Tagger",
    "TokenizationException",
    "Tokenizer",
]
