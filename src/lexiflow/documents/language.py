"""
Language identifiers used to scope documents and pipeline stages.
"""

from enum import Enum


class Language(str, Enum):
    """
    Supported languages, keyed by ISO 639-1 code.

    Language.ANY is the wildcard: a stage tagged ANY runs on every document,
    and a document tagged ANY is processed by every stage.
    """

    ANY = "any"
    ENGLISH = "en"
    FRENCH = "fr"
    GERMAN = "de"
    SPANISH = "es"
    PORTUGUESE = "pt"
    ITALIAN = "it"
    DUTCH = "nl"
    SWEDISH = "sv"
    DANISH = "da"
    NORWEGIAN = "no"
    FINNISH = "fi"
    POLISH = "pl"
    RUSSIAN = "ru"
    TURKISH = "tr"
    GREEK = "el"
    CHINESE = "zh"
    JAPANESE = "ja"
    KOREAN = "ko"
    ARABIC = "ar"

    @property
    def is_wildcard(self) -> bool:
        return self is Language.ANY

    def matches(self, other: "Language") -> bool:
        """True unless both languages are concrete and differ."""
        return self is Language.ANY or other is Language.ANY or self is other

    @classmethod
    def parse(cls, value: str) -> "Language":
        """
        Resolve a language from its code or its enum name.

        Args:
            value (str): "en", "English", "ENGLISH", "any", ...

        Returns:
            Language: The matching language

        Raises:
            ValueError: If the value names no supported language
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        try:
            return cls(text.lower())
        except ValueError:
            pass
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"Unknown language: {value!r}") from None
