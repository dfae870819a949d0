"""
Concept Index Package

Language-aware analysis routing, annotation field mapping, concept record
building and the rebuild coordinator that writes a Whoosh index directory.
"""

from .languages import DEFAULT_LANGUAGE_SUPPORT, SUPPORTED_LANGUAGES, LanguageSupportTable
from .fields import (
    DEFAULT_FIELD_MAPPING,
    FieldMappingTable,
    FieldSpec,
    FilterField,
    SearchableField,
    qualified_field_name,
    split_field_name,
)
from .analysis import AnalysisStrategy, AnalyzerRegistry, FieldAnalysis, FieldRoutingTable
from .document import ConceptDocumentBuilder, FieldValue, IndexRecord
from .writer import ConceptIndexWriter, build_schema
from .rebuild import (
    DocumentFailure,
    IndexRebuilder,
    RebuildFailure,
    RebuildResult,
    RebuildState,
    rebuild_index,
)
from .reader import ConceptIndexReader

__all__ = [
    "DEFAULT_LANGUAGE_SUPPORT",
    "SUPPORTED_LANGUAGES",
    "LanguageSupportTable",
    "DEFAULT_FIELD_MAPPING",
    "FieldMappingTable",
    "FieldSpec",
    "FilterField",
    "SearchableField",
    "qualified_field_name",
    "split_field_name",
    "AnalysisStrategy",
    "AnalyzerRegistry",
    "FieldAnalysis",
    "FieldRoutingTable",
    "ConceptDocumentBuilder",
    "FieldValue",
    "IndexRecord",
    "ConceptIndexWriter",
    "build_schema",
    "DocumentFailure",
    "IndexRebuilder",
    "RebuildFailure",
    "RebuildResult",
    "RebuildState",
    "rebuild_index",
    "ConceptIndexReader",
]
