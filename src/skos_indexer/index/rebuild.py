"""
Index Rebuild Coordinator

This module rebuilds a concept index directory from a stream of concepts.

Rebuild Protocol
----------------
PreparingDirectory -> AnalyzingLanguages -> WriterOpen -> Streaming
-> Closing -> Done, with a direct edge to Failed on precondition or
storage failures.

- A missing target directory is created; an existing one is emptied
  (entries that cannot be deleted are logged and skipped); an existing
  non-directory aborts the rebuild before anything is deleted
- Every rebuild writes a fresh generation; previous content is discarded
- One failing document is logged, counted and skipped
- The concept cursor and the index writer are released on every exit path
- Only one rebuild may own a given target directory at a time
"""

from __future__ import annotations

import logging
import shutil
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Set, Union

from ..config import settings
from ..core.errors import (
    DocumentWriteError,
    ErrorKind,
    RebuildError,
    TargetPreconditionError,
    error_for_kind,
)
from ..thesaurus.graph import ConceptCursor, ConceptResource
from .analysis import AnalyzerRegistry, FieldRoutingTable
from .document import ConceptDocumentBuilder
from .fields import DEFAULT_FIELD_MAPPING, FieldMappingTable
from .writer import ConceptIndexWriter, open_writer

logger = logging.getLogger("skos.rebuild")

WriterFactory = Callable[[Path, FieldRoutingTable, FieldMappingTable], ConceptIndexWriter]
ConceptSource = Union[ConceptCursor, Iterable[ConceptResource]]


# ---------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------

class RebuildState(str, Enum):
    PREPARING_DIRECTORY = "preparing_directory"
    ANALYZING_LANGUAGES = "analyzing_languages"
    WRITER_OPEN = "writer_open"
    STREAMING = "streaming"
    CLOSING = "closing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class DocumentFailure:
    uri: str
    reason: str


@dataclass(frozen=True)
class RebuildFailure:
    kind: ErrorKind
    reason: str
    stage: RebuildState


@dataclass
class RebuildResult:
    """
    Summary of one rebuild invocation.

    Attributes
    ----------
    processed : int
        Concepts pulled from the cursor.

    indexed : int
        Concepts whose record was accepted by the writer.

    errors : int
        Concepts skipped because their record could not be written.

    state : RebuildState
        DONE when the writer was opened, the stream exhausted and the
        generation committed; FAILED otherwise.
    """

    index_dir: Optional[Path] = None
    processed: int = 0
    indexed: int = 0
    errors: int = 0
    failures: List[DocumentFailure] = field(default_factory=list)
    state: RebuildState = RebuildState.PREPARING_DIRECTORY
    failure: Optional[RebuildFailure] = None

    @property
    def ok(self) -> bool:
        return self.state is RebuildState.DONE

    def raise_for_failure(self) -> None:
        """
        Raise the `RebuildError` matching a fatal failure, if any.
        """
        if self.failure is not None:
            raise error_for_kind(self.failure.kind, self.failure.reason)

    def summary(self) -> str:
        if self.failure is not None:
            return f"FAILURE ({self.failure.kind.value}): {self.failure.reason}"
        return f"Indexed {self.indexed} of {self.processed} concept(s) with {self.errors} error(s)."


# ---------------------------------------------------------------------
# Target Ownership
# ---------------------------------------------------------------------

_active_targets: Set[str] = set()
_targets_lock = threading.Lock()


@contextmanager
def _owned_target(target: Path) -> Iterator[Path]:
    key = str(target.resolve())
    with _targets_lock:
        if key in _active_targets:
            raise TargetPreconditionError(f"Index directory {target} is already being rebuilt.")
        _active_targets.add(key)
    try:
        yield target
    finally:
        with _targets_lock:
            _active_targets.discard(key)


@contextmanager
def _scoped_cursor(concepts: ConceptSource) -> Iterator[Iterator[ConceptResource]]:
    try:
        yield iter(concepts)
    finally:
        if isinstance(concepts, ConceptCursor):
            concepts.close()


def prepare_index_directory(target: Path, verbose: bool = True) -> Path:
    """
    Make `target` an existing, empty directory.

    Raises
    ------
    TargetPreconditionError
        If `target` exists but is not a directory, or cannot be created.
    """
    progress = logger.info if verbose else logger.debug

    if not target.exists():
        progress("Directory %s does not exist, creating it", target)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise TargetPreconditionError(
                f"Could not create directory {target}: {type(exc).__name__}"
            ) from exc
        return target

    if not target.is_dir():
        raise TargetPreconditionError(f"{target} exists but is not a directory")

    for entry in sorted(target.iterdir()):
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except OSError as exc:
            logger.warning("Could not delete %s: %s", entry, exc)

    return target


# ---------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------

class IndexRebuilder:
    """
    Rebuilds concept index directories.

    The coordinator holds no per-rebuild state; independent rebuilds of
    different directories may run concurrently on one instance.
    """

    def __init__(
        self,
        registry: Optional[AnalyzerRegistry] = None,
        field_mapping: FieldMappingTable = DEFAULT_FIELD_MAPPING,
        writer_factory: WriterFactory = open_writer,
        progress_every: int = 1000,
    ) -> None:
        self._registry = registry or AnalyzerRegistry(field_mapping=field_mapping)
        self._field_mapping = field_mapping
        self._writer_factory = writer_factory
        self._progress_every = progress_every

    def rebuild(
        self,
        concepts: Optional[ConceptSource],
        target: Optional[Union[str, Path]],
        languages: Optional[Iterable[str]] = None,
        transitive_collections: Optional[bool] = None,
        verbose: Optional[bool] = None,
    ) -> RebuildResult:
        """
        Rebuild the index at `target` from `concepts`.

        Parameters
        ----------
        concepts : ConceptCursor | Iterable[ConceptResource]
            Concept cursor. A `ConceptCursor` is closed before this method
            returns; plain iterables are only iterated.

        target : str | Path
            Index directory.

        languages : Optional[Iterable[str]]
            Languages to analyze. Defaults to settings.index_language_set;
            empty means every supported language.

        transitive_collections : Optional[bool]
            Whether to index transitive collection membership. Defaults to
            settings.index_transitive_collections.

        verbose : Optional[bool]
            Progress reporting only. Defaults to settings.index_verbose.

        Returns
        -------
        RebuildResult
            Counts and final state. Fatal outcomes are reported through
            `result.failure`; use `raise_for_failure()` to raise instead.
        """
        if languages is None:
            languages = settings.index_language_set
        if transitive_collections is None:
            transitive_collections = settings.index_transitive_collections
        if verbose is None:
            verbose = settings.index_verbose

        result = RebuildResult()

        if concepts is None:
            return self._fail(result, ErrorKind.CONFIGURATION, "Concept cursor is None")

        with _scoped_cursor(concepts) as cursor:
            if target is None:
                return self._fail(result, ErrorKind.CONFIGURATION, "Index directory is None")

            target_dir = Path(target)
            result.index_dir = target_dir

            try:
                with _owned_target(target_dir):
                    self._run(cursor, target_dir, languages, transitive_collections, verbose, result)
            except RebuildError as exc:
                return self._fail(result, exc.kind, str(exc))

        return result

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    def _run(
        self,
        cursor: Iterator[ConceptResource],
        target_dir: Path,
        languages: Iterable[str],
        transitive_collections: bool,
        verbose: bool,
        result: RebuildResult,
    ) -> None:
        progress = logger.info if verbose else logger.debug

        result.state = RebuildState.PREPARING_DIRECTORY
        prepare_index_directory(target_dir, verbose=verbose)

        result.state = RebuildState.ANALYZING_LANGUAGES
        progress("Initialising index analysers")
        routing = self._registry.build_routing(languages)
        progress("Routing %d field(s) for language(s): %s", len(routing), ", ".join(routing.languages) or "-")

        builder = ConceptDocumentBuilder(
            field_mapping=self._field_mapping,
            transitive_collections=transitive_collections,
        )

        result.state = RebuildState.WRITER_OPEN
        progress("Opening index writer at %s", target_dir)
        with self._writer_factory(target_dir, routing, self._field_mapping) as writer:
            result.state = RebuildState.STREAMING
            progress("Indexing concepts, this may take a few minutes")

            for concept in cursor:
                result.processed += 1
                record = builder.build(concept)

                try:
                    writer.add_record(record)
                except DocumentWriteError as exc:
                    result.errors += 1
                    result.failures.append(DocumentFailure(record.uri, str(exc)))
                    logger.error("Could not index concept %s: %s", record.uri, exc)
                else:
                    result.indexed += 1

                if self._progress_every and result.processed % self._progress_every == 0:
                    progress("Processed %d concept(s)", result.processed)

            progress(
                "Indexed %d concept(s) with %d error(s)",
                result.processed,
                result.errors,
            )
            result.state = RebuildState.CLOSING
            progress("Closing index writer")

        result.state = RebuildState.DONE
        progress("Rebuild of %s done", target_dir)

    def _fail(self, result: RebuildResult, kind: ErrorKind, reason: str) -> RebuildResult:
        logger.error("Rebuild failed (%s): %s", kind.value, reason)
        result.failure = RebuildFailure(kind=kind, reason=reason, stage=result.state)
        result.state = RebuildState.FAILED
        return result


def rebuild_index(
    concepts: Optional[ConceptSource],
    target: Optional[Union[str, Path]],
    languages: Optional[Iterable[str]] = None,
    transitive_collections: Optional[bool] = None,
    verbose: Optional[bool] = None,
) -> RebuildResult:
    """
    Rebuild an index with the default registry and field mapping.
    """
    return IndexRebuilder().rebuild(
        concepts,
        target,
        languages=languages,
        transitive_collections=transitive_collections,
        verbose=verbose,
    )
