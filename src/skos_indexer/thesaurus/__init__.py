"""
Thesaurus Package

Read-only graph collaborator: the concept cursor API consumed by the indexer
and an in-memory implementation loaded from JSON.
"""

from .models import Annotation, AnnotationKind, CollectionData, ConceptData, ThesaurusDocument
from .graph import (
    ConceptCursor,
    ConceptResource,
    Thesaurus,
    ThesaurusConcept,
    ThesaurusCursor,
    local_name_of,
)
from .loader import ThesaurusLoadError, load_thesaurus

__all__ = [
    "Annotation",
    "AnnotationKind",
    "CollectionData",
    "ConceptData",
    "ThesaurusDocument",
    "ConceptCursor",
    "ConceptResource",
    "Thesaurus",
    "ThesaurusConcept",
    "ThesaurusCursor",
    "local_name_of",
    "ThesaurusLoadError",
    "load_thesaurus",
]
