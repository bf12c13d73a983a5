"""
Document model: language-tagged text plus the annotations stages write.
"""

from .document import Document, EntityType, Span, Token
from .language import Language

__all__ = [
    "Document",
    "EntityType",
    "Language",
    "Span",
    "Token",
]
