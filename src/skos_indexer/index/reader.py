"""
Read-only access to a built concept index, for inspection and verification.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from whoosh import index as whoosh_index
from whoosh.query import Term

from ..core.errors import IndexStorageError
from .fields import FilterField, SearchableField


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class ConceptIndexReader:
    """
    Opens the current generation of an index directory.
    """

    def __init__(self, index_dir: Union[str, Path]) -> None:
        self._index_dir = Path(index_dir)
        try:
            if not whoosh_index.exists_in(str(self._index_dir)):
                raise IndexStorageError(f"No index found in {self._index_dir}")
            self._index = whoosh_index.open_dir(str(self._index_dir))
        except IndexStorageError:
            raise
        except Exception as exc:
            raise IndexStorageError(
                f"Failed to open index at {self._index_dir}: {type(exc).__name__}"
            ) from exc

    def close(self) -> None:
        self._index.close()

    def __enter__(self) -> "ConceptIndexReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def doc_count(self) -> int:
        return self._index.doc_count()

    def documents(self) -> List[Dict[str, List[str]]]:
        """
        Stored values of every document, each field as a list, ordered by URI.
        """
        with self._index.searcher() as searcher:
            docs = [self._normalize(fields) for fields in searcher.reader().all_stored_fields()]
        return sorted(docs, key=lambda d: d.get(SearchableField.URI.value, [""])[0])

    def get(self, uri: str) -> Optional[Dict[str, List[str]]]:
        with self._index.searcher() as searcher:
            fields = searcher.document(**{SearchableField.URI.value: uri})
        return self._normalize(fields) if fields is not None else None

    def indexed_field_names(self) -> List[str]:
        with self._index.reader() as reader:
            return sorted(reader.indexed_field_names())

    def terms(self, field_name: str) -> List[str]:
        """
        Analyzed terms of a field, as written to the index.
        """
        if field_name not in self._index.schema:
            return []
        with self._index.reader() as reader:
            return list(reader.field_terms(field_name))

    def concepts_in(self, filter_field: FilterField, value: str) -> List[str]:
        """
        URIs of the concepts carrying `value` in a filter field.
        """
        with self._index.searcher() as searcher:
            results = searcher.search(Term(filter_field.value, value), limit=None)
            uris = [
                self._normalize(hit.fields())[SearchableField.URI.value][0]
                for hit in results
            ]
        return sorted(uris)

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize(fields: Dict[str, Any]) -> Dict[str, List[str]]:
        return {name: _as_list(value) for name, value in fields.items()}
