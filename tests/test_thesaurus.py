import json

import pytest

from skos_indexer.thesaurus import (
    AnnotationKind,
    CollectionData,
    ConceptCursor,
    ConceptData,
    ConceptResource,
    Thesaurus,
    ThesaurusLoadError,
    load_thesaurus,
    local_name_of,
)

from conftest import COLL_A, COLL_B, EMPTY, SCHEME, SCHOOL, WATER


class TestLocalName:
    def test_fragment_after_hash(self):
        assert local_name_of("http://example.org/concept/school#ecole") == "ecole"

    def test_last_path_segment(self):
        assert local_name_of("http://example.org/concept/water") == "water"

    def test_empty_fragment_falls_back_to_uri(self):
        assert local_name_of("http://example.org/concept/") == "http://example.org/concept/"


class TestThesaurusGraph:
    def test_concepts_implement_resource_protocol(self, thesaurus):
        concept = thesaurus.get_concept(WATER)
        assert isinstance(concept, ConceptResource)
        assert concept.local_name == "water"
        assert concept.concept_schemes() == [SCHEME]

    def test_unknown_concept(self, thesaurus):
        assert thesaurus.get_concept("http://example.org/nope") is None

    def test_direct_and_transitive_collections(self, thesaurus):
        concept = thesaurus.get_concept(WATER)
        assert concept.collections() == [COLL_B]
        assert concept.collections_transitive() == [COLL_B, COLL_A]

    def test_concept_without_memberships(self, thesaurus):
        concept = thesaurus.get_concept(EMPTY)
        assert concept.collections() == []
        assert concept.collections_transitive() == []
        assert concept.annotations(AnnotationKind.PREF_LABEL) == []

    def test_membership_cycle_terminates(self):
        graph = Thesaurus(
            concepts=[ConceptData(uri="urn:c")],
            collections=[
                CollectionData(uri="urn:x", members=["urn:y"]),
                CollectionData(uri="urn:y", members=["urn:x", "urn:c"]),
            ],
        )
        assert graph.parent_collections_transitive("urn:c") == ["urn:y", "urn:x"]

    def test_annotation_language_is_normalized(self, thesaurus):
        labels = thesaurus.get_concept(SCHOOL).annotations(AnnotationKind.PREF_LABEL)
        assert [a.language for a in labels] == ["fr", "zz"]

        hidden = thesaurus.get_concept(SCHOOL).annotations(AnnotationKind.HIDDEN_LABEL)
        assert hidden[0].language is None


class TestThesaurusCursor:
    def test_lists_every_concept_in_order(self, thesaurus):
        with thesaurus.list_concepts() as cursor:
            uris = [c.uri for c in cursor]
        assert uris == [WATER, SCHOOL, EMPTY]

    def test_cursor_implements_cursor_protocol(self, thesaurus):
        assert isinstance(thesaurus.list_concepts(), ConceptCursor)
        assert not isinstance([], ConceptCursor)

    def test_close_stops_iteration(self, thesaurus):
        cursor = thesaurus.list_concepts()
        next(cursor)
        cursor.close()
        cursor.close()

        assert cursor.closed
        assert list(cursor) == []


class TestLoader:
    def test_load_json_document(self, tmp_path):
        path = tmp_path / "thesaurus.json"
        path.write_text(json.dumps({
            "schemes": ["urn:scheme"],
            "collections": [{"uri": "urn:coll", "members": ["urn:c1"]}],
            "concepts": [{
                "uri": "urn:c1",
                "schemes": ["urn:scheme"],
                "annotations": {
                    "prefLabel": [{"text": "River", "language": "EN"}],
                },
            }],
        }), encoding="utf-8")

        thesaurus = load_thesaurus(path)

        assert len(thesaurus) == 1
        concept = thesaurus.get_concept("urn:c1")
        assert concept.collections() == ["urn:coll"]
        label = concept.annotations(AnnotationKind.PREF_LABEL)[0]
        assert (label.text, label.language) == ("River", "en")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ThesaurusLoadError, match="Cannot read"):
            load_thesaurus(tmp_path / "missing.json")

    def test_invalid_document(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"concepts": [{"label": "no uri"}]}), encoding="utf-8")

        with pytest.raises(ThesaurusLoadError, match="Invalid thesaurus"):
            load_thesaurus(path)
