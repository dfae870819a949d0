"""
JSON thesaurus loading.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from .graph import Thesaurus
from .models import ThesaurusDocument

logger = logging.getLogger("skos.thesaurus")


class ThesaurusLoadError(RuntimeError):
    """Raised when a thesaurus file cannot be read or validated."""


def load_thesaurus(path: Union[str, Path]) -> Thesaurus:
    """
    Load a JSON thesaurus file into an in-memory `Thesaurus`.

    Raises
    ------
    ThesaurusLoadError
        If the file is missing, unreadable, or does not match
        `ThesaurusDocument`.
    """
    source = Path(path)

    try:
        raw = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise ThesaurusLoadError(
            f"Cannot read thesaurus file {source}: {type(exc).__name__}"
        ) from exc

    try:
        document = ThesaurusDocument.model_validate_json(raw)
    except ValidationError as exc:
        raise ThesaurusLoadError(
            f"Invalid thesaurus file {source}: {exc.error_count()} error(s)"
        ) from exc

    thesaurus = Thesaurus.from_document(document)
    logger.info(
        "Loaded thesaurus %s: %d concept(s), %d collection(s), %d scheme(s)",
        source,
        len(thesaurus),
        len(document.collections),
        len(document.schemes),
    )
    return thesaurus
