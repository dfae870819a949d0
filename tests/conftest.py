import pytest

from skos_indexer.thesaurus.graph import Thesaurus
from skos_indexer.thesaurus.models import (
    Annotation,
    AnnotationKind,
    CollectionData,
    ConceptData,
)

SCHEME = "http://example.org/scheme/main"
COLL_A = "http://example.org/collection/A"
COLL_B = "http://example.org/collection/B"

WATER = "http://example.org/concept/water"
SCHOOL = "http://example.org/concept/school#ecole"
EMPTY = "http://example.org/concept/empty"


@pytest.fixture
def thesaurus() -> Thesaurus:
    """
    Three concepts; WATER is a direct member of B, and B is nested in A.
    """
    water = ConceptData(
        uri=WATER,
        schemes=[SCHEME],
        annotations={
            AnnotationKind.PREF_LABEL: [
                Annotation(text="The Water Cycle", language="en"),
                Annotation(text="Cycle de l'eau", language="fr"),
            ],
            AnnotationKind.ALT_LABEL: [
                Annotation(text="Running waters", language="en"),
            ],
            AnnotationKind.DEFINITION: [
                Annotation(text="Movement of water", language="en"),
            ],
        },
    )
    school = ConceptData(
        uri=SCHOOL,
        schemes=[SCHEME],
        annotations={
            AnnotationKind.PREF_LABEL: [
                Annotation(text="Écoles", language="FR"),
                Annotation(text="Água Fria", language="zz"),
            ],
            AnnotationKind.HIDDEN_LABEL: [
                Annotation(text="h2o"),
                Annotation(text="   ", language="en"),
            ],
        },
    )
    empty = ConceptData(uri=EMPTY)

    return Thesaurus(
        concepts=[water, school, empty],
        collections=[
            CollectionData(uri=COLL_A, members=[COLL_B]),
            CollectionData(uri=COLL_B, members=[WATER]),
        ],
        schemes=[SCHEME],
    )


@pytest.fixture
def index_dir(tmp_path):
    return tmp_path / "index"
