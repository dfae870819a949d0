"""
Language support table.

Lists the language codes that have a dedicated analysis chain (stop words
and a snowball stemmer). Every other code falls back to default analysis.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterable, Optional, Tuple

SUPPORTED_LANGUAGES: Final[Tuple[str, ...]] = ("en", "fr", "es", "pt", "it", "de", "no")


def normalize_language(code: Optional[str]) -> Optional[str]:
    """
    Trim and lower-case a language code. Blank codes become None.
    """
    if code is None:
        return None
    code = code.strip().lower()
    return code or None


@dataclass(frozen=True)
class LanguageSupportTable:
    languages: Tuple[str, ...] = SUPPORTED_LANGUAGES

    def supports(self, code: Optional[str]) -> bool:
        return normalize_language(code) in self.languages

    def resolve(self, requested: Optional[Iterable[str]] = None) -> Tuple[str, ...]:
        """
        Languages to route for a requested set.

        None or an empty request means every supported language. Otherwise
        only the supported codes of the request are kept, in table order;
        unknown codes are ignored.
        """
        wanted = {
            code
            for code in (normalize_language(c) for c in (requested or ()))
            if code is not None
        }
        if not wanted:
            return self.languages
        return tuple(code for code in self.languages if code in wanted)


DEFAULT_LANGUAGE_SUPPORT: Final[LanguageSupportTable] = LanguageSupportTable()
