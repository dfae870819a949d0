"""
Concept Document Builder

Converts one concept, read through the `ConceptResource` accessors, into an
`IndexRecord`: a flat, multi-valued list of (field, value, stored) entries.

Records are ephemeral. They are built one at a time during a rebuild and
handed straight to the index writer; analysis happens later, at write time,
according to each field name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, NamedTuple, Set

from ..thesaurus.graph import ConceptResource
from .fields import DEFAULT_FIELD_MAPPING, FieldMappingTable, FilterField, SearchableField


class FieldValue(NamedTuple):
    name: str
    value: str
    stored: bool


@dataclass
class IndexRecord:
    """
    Multi-valued index document for one concept.
    """

    uri: str
    values: List[FieldValue] = field(default_factory=list)

    def add(self, name: str, value: str, stored: bool) -> None:
        self.values.append(FieldValue(name, value, stored))

    def field_names(self) -> Set[str]:
        return {v.name for v in self.values}

    def values_for(self, name: str) -> List[str]:
        return [v.value for v in self.values if v.name == name]

    def grouped(self) -> Dict[str, List[FieldValue]]:
        """
        Entries grouped by field name, in first-seen order.
        """
        groups: Dict[str, List[FieldValue]] = {}
        for v in self.values:
            groups.setdefault(v.name, []).append(v)
        return groups

    def __iter__(self) -> Iterator[FieldValue]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


class ConceptDocumentBuilder:
    """
    Builds `IndexRecord` instances from concepts.

    The builder is stateless between calls and only uses the read accessors
    of the concepts it is given.
    """

    def __init__(
        self,
        field_mapping: FieldMappingTable = DEFAULT_FIELD_MAPPING,
        transitive_collections: bool = True,
    ) -> None:
        self._field_mapping = field_mapping
        self._transitive_collections = transitive_collections

    @property
    def transitive_collections(self) -> bool:
        return self._transitive_collections

    def build(self, concept: ConceptResource) -> IndexRecord:
        """
        Build the index record of one concept.

        Missing information only yields fewer fields; a concept with no
        memberships and no annotations produces `uri` and `name` only.
        """
        uri = concept.uri
        record = IndexRecord(uri=uri)

        record.add(SearchableField.URI.field(), uri, True)
        record.add(SearchableField.NAME.field(), concept.local_name or uri, True)

        for scheme in concept.concept_schemes():
            record.add(FilterField.CONCEPT_SCHEME.value, scheme, True)

        for collection in concept.collections():
            record.add(FilterField.COLLECTION.value, collection, True)

        # Both collection families are emitted independently, even when they overlap
        if self._transitive_collections:
            for collection in concept.collections_transitive():
                record.add(FilterField.COLLECTION_TRANSITIVE.value, collection, True)

        for kind in self._field_mapping.kinds():
            specs = self._field_mapping.fields_for(kind)
            for annotation in concept.annotations(kind):
                if not annotation.text.strip():
                    continue
                for spec in specs:
                    record.add(
                        spec.field.field(annotation.language),
                        annotation.text,
                        spec.stored,
                    )

        return record
