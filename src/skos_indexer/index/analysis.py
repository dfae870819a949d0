"""
Analyzer Registry

This module builds the per-field analysis routing used when concept
records are written to the index.

Strategies
----------
- EXACT: whole value as a single, case-preserved term (`uri`, `name`)
- NORMALIZED_KEYWORD: lower-cased, stop words removed, diacritics folded,
  then concatenated back into one term (label facets)
- NORMALIZED_TOKEN: lower-cased, stop words removed, stemmed, diacritics
  folded (normalized label variants and definitions)
- DEFAULT: language-agnostic tokenization, lower-casing and folding, used
  for every field that is not explicitly routed

Building a routing table is pure: tables share no mutable state and are
safe to use from concurrent rebuilds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Final, Iterable, Mapping, Optional, Tuple

from whoosh.analysis import (
    Analyzer,
    CharsetFilter,
    Filter,
    IDTokenizer,
    LowercaseFilter,
    RegexTokenizer,
    StemFilter,
    StopFilter,
)
from whoosh.support.charset import accent_map

from .fields import DEFAULT_FIELD_MAPPING, FieldMappingTable, SearchableField
from .languages import DEFAULT_LANGUAGE_SUPPORT, LanguageSupportTable


class AnalysisStrategy(str, Enum):
    EXACT = "exact"
    NORMALIZED_KEYWORD = "normalized_keyword"
    NORMALIZED_TOKEN = "normalized_token"
    DEFAULT = "default"


# ---------------------------------------------------------------------
# Analysis Chains
# ---------------------------------------------------------------------

class ConcatFilter(Filter):
    """
    Joins every surviving token of a value into a single token.
    """

    def __init__(self, separator: str = " ") -> None:
        self.separator = separator

    def __call__(self, tokens):
        parts = []
        last = None
        for t in tokens:
            if t.stopped:
                continue
            parts.append(t.text)
            last = t
        if last is not None:
            last.text = self.separator.join(parts)
            yield last


@dataclass(frozen=True)
class FieldAnalysis:
    """
    Analysis assigned to one physical field.
    """

    strategy: AnalysisStrategy
    language: Optional[str] = None

    def analyzer(self) -> Analyzer:
        if self.strategy is AnalysisStrategy.EXACT:
            return IDTokenizer()

        chain = RegexTokenizer() | LowercaseFilter()

        if self.strategy is AnalysisStrategy.DEFAULT or self.language is None:
            return chain | CharsetFilter(accent_map)

        chain = chain | StopFilter(stoplist=None, minsize=1, lang=self.language)
        if self.strategy is AnalysisStrategy.NORMALIZED_TOKEN:
            chain = chain | StemFilter(lang=self.language)
        chain = chain | CharsetFilter(accent_map)

        if self.strategy is AnalysisStrategy.NORMALIZED_KEYWORD:
            chain = chain | ConcatFilter()
        return chain


EXACT_ANALYSIS: Final[FieldAnalysis] = FieldAnalysis(AnalysisStrategy.EXACT)
DEFAULT_ANALYSIS: Final[FieldAnalysis] = FieldAnalysis(AnalysisStrategy.DEFAULT)


# ---------------------------------------------------------------------
# Routing Table
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class FieldRoutingTable:
    """
    Immutable map: physical field name -> `FieldAnalysis`.
    """

    routes: Mapping[str, FieldAnalysis]
    languages: Tuple[str, ...] = ()
    default: FieldAnalysis = field(default=DEFAULT_ANALYSIS)

    def __post_init__(self) -> None:
        object.__setattr__(self, "routes", MappingProxyType(dict(self.routes)))

    def analysis_for(self, field_name: str) -> FieldAnalysis:
        return self.routes.get(field_name, self.default)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self.routes

    def __len__(self) -> int:
        return len(self.routes)


class AnalyzerRegistry:
    """
    Builds `FieldRoutingTable` instances for requested language sets.
    """

    def __init__(
        self,
        language_support: LanguageSupportTable = DEFAULT_LANGUAGE_SUPPORT,
        field_mapping: FieldMappingTable = DEFAULT_FIELD_MAPPING,
    ) -> None:
        self._language_support = language_support
        self._field_mapping = field_mapping

    def build_routing(self, requested_languages: Optional[Iterable[str]] = None) -> FieldRoutingTable:
        """
        Build the routing table for a language set.

        Parameters
        ----------
        requested_languages : Optional[Iterable[str]]
            Language codes to route. None or empty routes every supported
            language; unsupported codes are ignored.

        Returns
        -------
        FieldRoutingTable
            A new table; `uri` and `name` are always routed to EXACT.
        """
        languages = self._language_support.resolve(requested_languages)

        routes: Dict[str, FieldAnalysis] = {
            SearchableField.URI.field(): EXACT_ANALYSIS,
            SearchableField.NAME.field(): EXACT_ANALYSIS,
        }

        for lang in languages:
            for spec in self._field_mapping.searchable_fields():
                strategy = (
                    AnalysisStrategy.NORMALIZED_TOKEN
                    if spec.field.tokenized
                    else AnalysisStrategy.NORMALIZED_KEYWORD
                )
                routes[spec.field.field(lang)] = FieldAnalysis(strategy, lang)

        return FieldRoutingTable(routes=routes, languages=languages)
