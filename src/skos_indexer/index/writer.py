"""
Whoosh Concept Index Writer

This module turns a `FieldRoutingTable` into a Whoosh schema and writes
`IndexRecord` instances into a fresh index generation.

Key Properties
--------------
- Every routed field gets an explicit schema field with its analyzer
- Un-routed languages fall through to `<field>@*` glob fields analyzed with
  the default strategy, so field-name resolution never fails
- Storage policy is taken from the field mapping table
- Values are analyzed here, per field, and handed to Whoosh as token lists
  so that multi-valued fields keep every value
- The writer is committed on a clean exit and cancelled otherwise
- A document that fails inside Whoosh may leave postings under its document
  number. That slot is closed with an empty placeholder, and placeholders are
  deleted and merged away when the generation is committed
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from whoosh import index as whoosh_index
from whoosh.fields import ID, TEXT, FieldType, Schema

from ..core.errors import DocumentWriteError, IndexStorageError
from .analysis import AnalysisStrategy, FieldAnalysis, FieldRoutingTable
from .document import IndexRecord
from .fields import (
    DEFAULT_FIELD_MAPPING,
    FieldMappingTable,
    FilterField,
    SearchableField,
    qualified_field_name,
)

logger = logging.getLogger("skos.writer")

STORED_PREFIX = "_stored_"


# ---------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------

def field_type(analysis: FieldAnalysis, stored: bool) -> FieldType:
    if analysis.strategy is AnalysisStrategy.EXACT:
        return ID(stored=stored)
    return TEXT(analyzer=analysis.analyzer(), stored=stored)


def build_schema(
    routing: FieldRoutingTable,
    field_mapping: FieldMappingTable = DEFAULT_FIELD_MAPPING,
) -> Schema:
    """
    Build the Whoosh schema for one index generation.
    """
    schema = Schema()

    for searchable in (SearchableField.URI, SearchableField.NAME):
        name = searchable.field()
        schema.add(name, field_type(routing.analysis_for(name), stored=True))

    for filterable in FilterField:
        schema.add(filterable.value, ID(stored=True))

    for spec in field_mapping.searchable_fields():
        for lang in routing.languages:
            name = spec.field.field(lang)
            schema.add(name, field_type(routing.analysis_for(name), spec.stored))

        plain = spec.field.field()
        schema.add(plain, field_type(routing.analysis_for(plain), spec.stored))

        schema.add(
            qualified_field_name(spec.field.value, "*"),
            field_type(routing.default, spec.stored),
            glob=True,
        )

    return schema


# ---------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------

class ConceptIndexWriter:
    """
    Writes concept records into a new Whoosh index generation.

    Use as a context manager: entering opens the writer, a clean exit
    commits the generation and an exception cancels it.
    """

    def __init__(
        self,
        index_dir: Union[str, Path],
        routing: FieldRoutingTable,
        field_mapping: FieldMappingTable = DEFAULT_FIELD_MAPPING,
    ) -> None:
        self._index_dir = Path(index_dir)
        self._schema = build_schema(routing, field_mapping)
        self._index = None
        self._writer = None
        self._added = 0
        self._slots = 0
        self._masked: List[int] = []

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def added(self) -> int:
        return self._added

    @property
    def masked(self) -> List[int]:
        """
        Document numbers of placeholder slots left by failed documents.
        """
        return list(self._masked)

    @property
    def is_open(self) -> bool:
        return self._writer is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """
        Create a fresh generation in the index directory and open a writer.
        """
        try:
            self._index = whoosh_index.create_in(str(self._index_dir), self._schema)
            self._writer = self._index.writer()
        except Exception as exc:
            self._index = None
            self._writer = None
            raise IndexStorageError(
                f"Failed to open index writer at {self._index_dir}: {type(exc).__name__}"
            ) from exc

    def commit(self) -> None:
        """
        Finalize the generation.

        When failed documents left placeholder slots, they are deleted in a
        second, optimizing commit so that none of their terms survive.
        """
        writer = self._require_writer()
        self._writer = None
        try:
            writer.commit()
            if self._masked:
                self._purge_masked()
        except Exception as exc:
            raise IndexStorageError(
                f"Failed to commit index at {self._index_dir}: {type(exc).__name__}"
            ) from exc

    def cancel(self) -> None:
        writer, self._writer = self._writer, None
        if writer is None:
            return
        try:
            writer.cancel()
        except Exception:
            logger.exception("Failed to cancel index writer at %s", self._index_dir)

    def __enter__(self) -> "ConceptIndexWriter":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.cancel()

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def add_record(self, record: IndexRecord) -> None:
        """
        Submit one record.

        Raises
        ------
        DocumentWriteError
            If the record cannot be analyzed or added to the writer.
        """
        writer = self._require_writer()

        try:
            fields = self.document_fields(record)
        except Exception as exc:
            raise DocumentWriteError(
                f"Failed to write concept {record.uri}: {type(exc).__name__}: {exc}"
            ) from exc

        try:
            writer.add_document(**fields)
        except Exception as exc:
            self._close_failed_slot(writer)
            raise DocumentWriteError(
                f"Failed to write concept {record.uri}: {type(exc).__name__}: {exc}"
            ) from exc

        self._slots += 1
        self._added += 1

    def document_fields(self, record: IndexRecord) -> Dict[str, Any]:
        """
        Map a record to Whoosh `add_document` keyword arguments.

        Each field receives the analyzed tokens of all its values; stored
        fields keep the raw values under the `_stored_` key.
        """
        fields: Dict[str, Any] = {}

        for name, entries in record.grouped().items():
            fieldobj = self._schema[name]
            raw: List[str] = [entry.value for entry in entries]

            tokens: List[str] = []
            for value in raw:
                tokens.extend(t.text for t in fieldobj.analyzer(value, mode="index"))

            fields[name] = tokens
            if fieldobj.stored:
                fields[STORED_PREFIX + name] = raw

        return fields

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    def _require_writer(self):
        if self._writer is None:
            raise IndexStorageError("Index writer is not open.")
        return self._writer

    def _close_failed_slot(self, writer) -> None:
        # Whoosh keeps postings added before the failure under the current
        # document number; an empty document takes that number instead
        docnum = self._slots
        try:
            writer.add_document()
        except Exception as exc:
            raise IndexStorageError(
                f"Failed to recover index writer at {self._index_dir}: {type(exc).__name__}"
            ) from exc
        self._slots += 1
        self._masked.append(docnum)
        logger.debug("Masked document slot %d in %s", docnum, self._index_dir)

    def _purge_masked(self) -> None:
        writer = self._index.writer()
        try:
            for docnum in self._masked:
                writer.delete_document(docnum)
        except Exception:
            writer.cancel()
            raise
        writer.commit(optimize=True)
        logger.info(
            "Removed %d failed document slot(s) from %s", len(self._masked), self._index_dir
        )


def open_writer(
    index_dir: Union[str, Path],
    routing: FieldRoutingTable,
    field_mapping: Optional[FieldMappingTable] = None,
) -> ConceptIndexWriter:
    """
    Factory used by the rebuild coordinator.
    """
    return ConceptIndexWriter(index_dir, routing, field_mapping or DEFAULT_FIELD_MAPPING)
