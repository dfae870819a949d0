"""
Index Fields and Annotation Mapping

This module names the physical fields of a concept index and holds the
mapping from annotation kinds to the fields each annotation fans out to.

Field Naming
------------
- Multilingual fields are qualified by language as `<field>@<lang>`
  (e.g. `prefLabel@en`, `definition@fr`)
- A missing language yields the plain field name (e.g. `prefLabel`)
- `uri` and `name` are never qualified
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Final, Iterator, Mapping, NamedTuple, Optional, Tuple

from ..thesaurus.models import AnnotationKind
from .languages import normalize_language

LANGUAGE_SEPARATOR: Final[str] = "@"


# ---------------------------------------------------------------------
# Field Names
# ---------------------------------------------------------------------

class SearchableField(str, Enum):
    """Searchable fields of a concept index."""

    URI = "uri"
    NAME = "name"

    PREF_LABEL = "prefLabel"
    ALT_LABEL = "altLabel"
    HIDDEN_LABEL = "hiddenLabel"
    LABEL = "label"

    IX_PREF_LABEL = "ixprefLabel"
    IX_ALT_LABEL = "ixaltLabel"
    IX_HIDDEN_LABEL = "ixhiddenLabel"
    IX_LABEL = "ixlabel"

    DEFINITION = "definition"

    @property
    def multilingual(self) -> bool:
        return self not in (SearchableField.URI, SearchableField.NAME)

    @property
    def tokenized(self) -> bool:
        """
        True for fields meant for inexact matching (normalized variants and
        definitions); label facets are matched as whole values.
        """
        return self in (
            SearchableField.IX_PREF_LABEL,
            SearchableField.IX_ALT_LABEL,
            SearchableField.IX_HIDDEN_LABEL,
            SearchableField.IX_LABEL,
            SearchableField.DEFINITION,
        )

    def field(self, language: Optional[str] = None) -> str:
        """
        Physical field name for this field in the given language.
        """
        if not self.multilingual:
            return self.value
        return qualified_field_name(self.value, language)


class FilterField(str, Enum):
    """Stored, unanalyzed fields used to filter concepts."""

    CONCEPT_SCHEME = "cs"
    COLLECTION = "collection"
    COLLECTION_TRANSITIVE = "collTrans"


def qualified_field_name(name: str, language: Optional[str]) -> str:
    lang = normalize_language(language)
    if lang is None:
        return name
    return f"{name}{LANGUAGE_SEPARATOR}{lang}"


def split_field_name(qualified: str) -> Tuple[str, Optional[str]]:
    """
    Split a physical field name into (field, language).
    """
    name, sep, lang = qualified.partition(LANGUAGE_SEPARATOR)
    return name, (lang or None) if sep else None


# ---------------------------------------------------------------------
# Annotation Mapping
# ---------------------------------------------------------------------

class FieldSpec(NamedTuple):
    field: SearchableField
    stored: bool


@dataclass(frozen=True)
class FieldMappingTable:
    """
    Immutable mapping: annotation kind -> ordered output fields.

    A searchable field must carry the same storage policy wherever it
    appears, since storage is a property of the physical field.
    """

    entries: Mapping[AnnotationKind, Tuple[FieldSpec, ...]]
    _storage: Mapping[SearchableField, bool] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        storage: Dict[SearchableField, bool] = {}
        for kind, specs in self.entries.items():
            for spec in specs:
                previous = storage.setdefault(spec.field, spec.stored)
                if previous != spec.stored:
                    raise ValueError(
                        f"Conflicting storage policy for field '{spec.field.value}' "
                        f"(annotation kind '{kind.value}')."
                    )
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))
        object.__setattr__(self, "_storage", MappingProxyType(storage))

    def fields_for(self, kind: AnnotationKind) -> Tuple[FieldSpec, ...]:
        return self.entries.get(kind, ())

    def kinds(self) -> Tuple[AnnotationKind, ...]:
        return tuple(self.entries)

    def searchable_fields(self) -> Iterator[FieldSpec]:
        """
        Each distinct output field once, with its storage policy.
        """
        for searchable, stored in self._storage.items():
            yield FieldSpec(searchable, stored)

    def is_stored(self, searchable: SearchableField) -> bool:
        return self._storage.get(searchable, False)


def _label_fields(kind_field: SearchableField, ix_field: SearchableField) -> Tuple[FieldSpec, ...]:
    return (
        FieldSpec(kind_field, True),
        FieldSpec(SearchableField.LABEL, False),
        FieldSpec(ix_field, False),
        FieldSpec(SearchableField.IX_LABEL, False),
    )


DEFAULT_FIELD_MAPPING: Final[FieldMappingTable] = FieldMappingTable({
    AnnotationKind.PREF_LABEL: _label_fields(SearchableField.PREF_LABEL, SearchableField.IX_PREF_LABEL),
    AnnotationKind.ALT_LABEL: _label_fields(SearchableField.ALT_LABEL, SearchableField.IX_ALT_LABEL),
    AnnotationKind.HIDDEN_LABEL: _label_fields(SearchableField.HIDDEN_LABEL, SearchableField.IX_HIDDEN_LABEL),
    AnnotationKind.DEFINITION: (FieldSpec(SearchableField.DEFINITION, False),),
})
