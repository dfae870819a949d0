"""
Indexing Error Taxonomy

This module defines the exceptions and error kinds shared by the indexing
pipeline.

Propagation Rules
-----------------
- Configuration and target precondition errors are fatal and are reported
  before any side effect on the target directory.
- Storage errors while opening or finalizing the writer are fatal.
- Document write errors are recoverable: they are counted and logged by the
  rebuild coordinator, which continues with the next concept.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


# ---------------------------------------------------------------------
# Error Kinds
# ---------------------------------------------------------------------

class ErrorKind(str, Enum):
    """Classification of indexing failures."""

    CONFIGURATION = "configuration"
    TARGET_PRECONDITION = "target_precondition"
    STORAGE = "storage"
    DOCUMENT_WRITE = "document_write"

    @property
    def fatal(self) -> bool:
        return self is not ErrorKind.DOCUMENT_WRITE


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class IndexingError(RuntimeError):
    """Base error for the indexing pipeline."""


class RebuildError(IndexingError):
    """
    Raised when a rebuild cannot complete.

    Attributes
    ----------
    kind : ErrorKind
        Which part of the taxonomy the failure belongs to.
    """

    kind: ErrorKind = ErrorKind.STORAGE

    def __init__(self, message: str, kind: Optional[ErrorKind] = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class ConfigurationError(RebuildError):
    """Raised when a required rebuild argument is missing."""

    kind = ErrorKind.CONFIGURATION


class TargetPreconditionError(RebuildError):
    """Raised when the target location cannot host an index directory."""

    kind = ErrorKind.TARGET_PRECONDITION


class IndexStorageError(RebuildError):
    """Raised when the index writer cannot be opened or finalized."""

    kind = ErrorKind.STORAGE


class DocumentWriteError(IndexingError):
    """Raised when a single index record cannot be submitted to the writer."""

    kind = ErrorKind.DOCUMENT_WRITE


_ERRORS_BY_KIND = {
    ErrorKind.CONFIGURATION: ConfigurationError,
    ErrorKind.TARGET_PRECONDITION: TargetPreconditionError,
    ErrorKind.STORAGE: IndexStorageError,
}


def error_for_kind(kind: ErrorKind, message: str) -> RebuildError:
    """
    Build the exception matching a fatal error kind.
    """
    error_cls = _ERRORS_BY_KIND.get(kind, RebuildError)
    return error_cls(message, kind=kind)
