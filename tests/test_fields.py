import pytest

from skos_indexer.index.fields import (
    DEFAULT_FIELD_MAPPING,
    FieldMappingTable,
    FieldSpec,
    SearchableField,
    qualified_field_name,
    split_field_name,
)
from skos_indexer.thesaurus.models import AnnotationKind


class TestFieldNames:
    def test_qualified_name(self):
        assert SearchableField.PREF_LABEL.field("EN") == "prefLabel@en"
        assert SearchableField.DEFINITION.field() == "definition"
        assert SearchableField.LABEL.field("  ") == "label"

    def test_uri_and_name_never_qualified(self):
        assert SearchableField.URI.field("en") == "uri"
        assert SearchableField.NAME.field("fr") == "name"

    def test_split(self):
        assert split_field_name("ixlabel@de") == ("ixlabel", "de")
        assert split_field_name("uri") == ("uri", None)
        assert split_field_name(qualified_field_name("altLabel", "zz")) == ("altLabel", "zz")


class TestFieldMapping:
    @pytest.mark.parametrize("kind, expected", [
        (AnnotationKind.PREF_LABEL, ("prefLabel", "label", "ixprefLabel", "ixlabel")),
        (AnnotationKind.ALT_LABEL, ("altLabel", "label", "ixaltLabel", "ixlabel")),
        (AnnotationKind.HIDDEN_LABEL, ("hiddenLabel", "label", "ixhiddenLabel", "ixlabel")),
        (AnnotationKind.DEFINITION, ("definition",)),
    ])
    def test_fan_out(self, kind, expected):
        specs = DEFAULT_FIELD_MAPPING.fields_for(kind)
        assert tuple(spec.field.value for spec in specs) == expected

    def test_only_label_facets_are_stored(self):
        stored = {s.field.value for s in DEFAULT_FIELD_MAPPING.searchable_fields() if s.stored}
        assert stored == {"prefLabel", "altLabel", "hiddenLabel"}
        assert not DEFAULT_FIELD_MAPPING.is_stored(SearchableField.DEFINITION)

    def test_searchable_fields_are_distinct(self):
        fields = [s.field for s in DEFAULT_FIELD_MAPPING.searchable_fields()]
        assert len(fields) == len(set(fields)) == 9

    def test_conflicting_storage_policy_rejected(self):
        with pytest.raises(ValueError, match="Conflicting storage policy"):
            FieldMappingTable({
                AnnotationKind.PREF_LABEL: (FieldSpec(SearchableField.LABEL, True),),
                AnnotationKind.ALT_LABEL: (FieldSpec(SearchableField.LABEL, False),),
            })

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_FIELD_MAPPING.entries[AnnotationKind.DEFINITION] = ()
