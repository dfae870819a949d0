"""
Thesaurus Graph Access

This module defines the read-only cursor API consumed by the indexing
pipeline, together with an in-memory thesaurus that implements it.

Key Properties
--------------
- Concepts are exposed through the `ConceptResource` protocol; the indexing
  pipeline never depends on the concrete graph implementation
- Concept listing returns a closeable, forward-only cursor that is also a
  context manager
- Transitive collection membership is resolved lazily, per concept, by
  walking nested collection membership upward
"""

from __future__ import annotations

import logging
from collections import deque
from typing import (
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

from .models import (
    Annotation,
    AnnotationKind,
    CollectionData,
    ConceptData,
    ThesaurusDocument,
)

logger = logging.getLogger("skos.thesaurus")


# ---------------------------------------------------------------------
# Cursor API
# ---------------------------------------------------------------------

@runtime_checkable
class ConceptResource(Protocol):
    """Read accessors for one concept."""

    @property
    def uri(self) -> str: ...

    @property
    def local_name(self) -> str: ...

    def concept_schemes(self) -> Sequence[str]: ...

    def collections(self) -> Sequence[str]: ...

    def collections_transitive(self) -> Sequence[str]: ...

    def annotations(self, kind: AnnotationKind) -> Sequence[Annotation]: ...


@runtime_checkable
class ConceptCursor(Protocol):
    """Closeable, forward-only iterator over concepts."""

    def __iter__(self) -> Iterator[ConceptResource]: ...

    def __next__(self) -> ConceptResource: ...

    def close(self) -> None: ...


def local_name_of(uri: str) -> str:
    """
    Return the fragment of a URI after its last '#' or '/'.

    Falls back to the full URI when the fragment is empty.
    """
    cut = max(uri.rfind("#"), uri.rfind("/"))
    name = uri[cut + 1:] if cut >= 0 else uri
    return name or uri


# ---------------------------------------------------------------------
# In-Memory Implementation
# ---------------------------------------------------------------------

class ThesaurusCursor:
    """
    Cursor over a snapshot of concepts.

    Iteration stops once the cursor is closed. Closing twice is a no-op.
    """

    def __init__(self, concepts: Iterable[ConceptResource]) -> None:
        self._iter: Optional[Iterator[ConceptResource]] = iter(concepts)

    @property
    def closed(self) -> bool:
        return self._iter is None

    def __iter__(self) -> "ThesaurusCursor":
        return self

    def __next__(self) -> ConceptResource:
        if self._iter is None:
            raise StopIteration
        return next(self._iter)

    def close(self) -> None:
        self._iter = None

    def __enter__(self) -> "ThesaurusCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ThesaurusConcept:
    """
    `ConceptResource` view over a `ConceptData` held by a `Thesaurus`.
    """

    def __init__(self, data: ConceptData, thesaurus: "Thesaurus") -> None:
        self._data = data
        self._thesaurus = thesaurus

    @property
    def uri(self) -> str:
        return self._data.uri

    @property
    def local_name(self) -> str:
        return self._data.local_name or local_name_of(self._data.uri)

    def concept_schemes(self) -> List[str]:
        return list(self._data.schemes)

    def collections(self) -> List[str]:
        return self._thesaurus.parent_collections(self._data.uri)

    def collections_transitive(self) -> List[str]:
        return self._thesaurus.parent_collections_transitive(self._data.uri)

    def annotations(self, kind: AnnotationKind) -> List[Annotation]:
        return list(self._data.annotations.get(kind, ()))

    def __repr__(self) -> str:
        return f"ThesaurusConcept(uri={self.uri!r})"


class Thesaurus:
    """
    Read-only, in-memory thesaurus graph.

    Member-to-collection edges are indexed once at construction. Nothing is
    precomputed for transitive membership.
    """

    def __init__(
        self,
        concepts: Iterable[ConceptData] = (),
        collections: Iterable[CollectionData] = (),
        schemes: Iterable[str] = (),
    ) -> None:
        self._concepts: Dict[str, ConceptData] = {}
        for concept in concepts:
            if concept.uri in self._concepts:
                logger.warning("Duplicate concept %s; keeping the last one", concept.uri)
            self._concepts[concept.uri] = concept

        self._collections: Dict[str, CollectionData] = {
            c.uri: c for c in collections
        }
        self._schemes: List[str] = list(schemes)

        self._parents: Dict[str, List[str]] = {}
        for collection in self._collections.values():
            for member in collection.members:
                parents = self._parents.setdefault(member, [])
                if collection.uri not in parents:
                    parents.append(collection.uri)

    @classmethod
    def from_document(cls, document: ThesaurusDocument) -> "Thesaurus":
        return cls(
            concepts=document.concepts,
            collections=document.collections,
            schemes=document.schemes,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._concepts)

    @property
    def schemes(self) -> List[str]:
        return list(self._schemes)

    @property
    def collection_uris(self) -> List[str]:
        return list(self._collections)

    def get_concept(self, uri: str) -> Optional[ThesaurusConcept]:
        data = self._concepts.get(uri)
        return ThesaurusConcept(data, self) if data is not None else None

    def list_concepts(self) -> ThesaurusCursor:
        """
        Open a cursor over every concept, in insertion order.
        """
        return ThesaurusCursor(
            ThesaurusConcept(data, self) for data in list(self._concepts.values())
        )

    def parent_collections(self, member_uri: str) -> List[str]:
        """
        Collections that list `member_uri` as a direct member.
        """
        return list(self._parents.get(member_uri, ()))

    def parent_collections_transitive(self, member_uri: str) -> List[str]:
        """
        Collections reachable from `member_uri` through nested membership.

        Direct collections come first, followed by ancestors in breadth-first
        order. Membership cycles are tolerated.
        """
        seen: List[str] = []
        queue = deque(self._parents.get(member_uri, ()))

        while queue:
            uri = queue.popleft()
            if uri in seen:
                continue
            seen.append(uri)
            queue.extend(self._parents.get(uri, ()))

        return seen
