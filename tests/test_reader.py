import pytest

from skos_indexer.index.fields import FilterField
from skos_indexer.index.reader import ConceptIndexReader
from skos_indexer.index.rebuild import rebuild_index
from skos_indexer.thesaurus import Annotation, AnnotationKind, ConceptData, Thesaurus

from conftest import COLL_A, COLL_B, EMPTY, SCHEME, SCHOOL, WATER


@pytest.fixture
def build(thesaurus, index_dir):
    def _build(languages=()):
        result = rebuild_index(
            thesaurus.list_concepts(),
            index_dir,
            languages=languages,
            transitive_collections=True,
            verbose=False,
        )
        assert result.ok
        return ConceptIndexReader(index_dir)
    return _build


class TestStoredFields:
    def test_stored_document(self, build):
        with build() as reader:
            doc = reader.get(WATER)

        assert doc["uri"] == [WATER]
        assert doc["name"] == ["water"]
        assert doc["cs"] == [SCHEME]
        assert doc["collection"] == [COLL_B]
        assert doc["collTrans"] == [COLL_B, COLL_A]
        assert doc["prefLabel@en"] == ["The Water Cycle"]
        assert doc["altLabel@en"] == ["Running waters"]

    def test_unstored_fields_are_absent(self, build):
        with build() as reader:
            doc = reader.get(WATER)

        for name in ("label@en", "ixprefLabel@en", "ixlabel@en", "definition@en"):
            assert name not in doc

    def test_minimal_document(self, build):
        with build() as reader:
            assert reader.get(EMPTY) == {"uri": [EMPTY], "name": ["empty"]}

    def test_unknown_uri(self, build):
        with build() as reader:
            assert reader.get("http://example.org/nope") is None

    def test_documents_sorted_by_uri(self, build):
        with build() as reader:
            uris = [d["uri"][0] for d in reader.documents()]
        assert uris == sorted([WATER, SCHOOL, EMPTY])


class TestIndexedTerms:
    def test_exact_fields(self, build):
        with build() as reader:
            assert WATER in reader.terms("uri")
            assert "ecole" in reader.terms("name")

    def test_label_facet_is_single_normalized_term(self, build):
        with build() as reader:
            assert reader.terms("prefLabel@en") == ["water cycle"]
            assert "ecoles" in reader.terms("prefLabel@fr")

    def test_normalized_variants_are_stemmed(self, build):
        with build() as reader:
            assert reader.terms("ixaltLabel@en") == ["run", "water"]
            assert "water" in reader.terms("definition@en")
            assert "of" not in reader.terms("definition@en")

    def test_unknown_language_uses_default_analysis(self, build):
        with build() as reader:
            assert reader.terms("prefLabel@zz") == ["agua", "fria"]
            assert "prefLabel@zz" in reader.indexed_field_names()

    def test_unlanguaged_annotation(self, build):
        with build() as reader:
            assert reader.terms("hiddenLabel") == ["h2o"]
            assert reader.get(SCHOOL)["hiddenLabel"] == ["h2o"]

    def test_unrouted_language_set(self, build):
        with build(languages=["zz"]) as reader:
            assert reader.terms("prefLabel@en") == ["cycle", "the", "water"]

    def test_unknown_field(self, build):
        with build() as reader:
            assert reader.terms("nope") == []


class TestFilters:
    def test_concept_scheme(self, build):
        with build() as reader:
            assert reader.concepts_in(FilterField.CONCEPT_SCHEME, SCHEME) == sorted([WATER, SCHOOL])

    def test_doc_count(self, build):
        with build() as reader:
            assert reader.doc_count() == 3


class TestShortLabels:
    def test_single_character_label_reaches_every_fan_out_field(self, index_dir):
        graph = Thesaurus(concepts=[
            ConceptData(
                uri="urn:concept:c",
                annotations={
                    AnnotationKind.PREF_LABEL: [Annotation(text="C", language="en")],
                },
            ),
        ])
        result = rebuild_index(graph.list_concepts(), index_dir, languages=["en"], verbose=False)
        assert result.ok

        with ConceptIndexReader(index_dir) as reader:
            for name in ("prefLabel@en", "label@en", "ixprefLabel@en", "ixlabel@en"):
                assert reader.terms(name) == ["c"]
