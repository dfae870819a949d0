"""
Thesaurus Data Models

This module defines the canonical data model for a thesaurus held by the
in-memory graph collaborator: language-tagged annotations, concepts,
collections and the thesaurus document read from JSON.

Each `ConceptData` corresponds to ONE concept and carries its annotations
grouped by annotation kind.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnnotationKind(str, Enum):
    """Annotation properties that are indexed for a concept."""

    PREF_LABEL = "prefLabel"
    ALT_LABEL = "altLabel"
    HIDDEN_LABEL = "hiddenLabel"
    DEFINITION = "definition"


class Annotation(BaseModel):
    """
    A single language-tagged text value.

    A missing or blank language means the value has no language.
    """

    text: str = Field(
        ...,
        description="Annotation text as it appears in the thesaurus.",
    )

    language: Optional[str] = Field(
        default=None,
        description="Optional language code (e.g. 'en', 'fr').",
    )

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )

    @field_validator("language", mode="before")
    @classmethod
    def normalize_language(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip().lower()
        return v or None


class ConceptData(BaseModel):
    """
    A thesaurus concept as stored by the graph collaborator.
    """

    uri: str = Field(
        ...,
        min_length=1,
        description="Concept URI.",
    )

    local_name: Optional[str] = Field(
        default=None,
        description="Local name; derived from the URI when omitted.",
    )

    schemes: List[str] = Field(
        default_factory=list,
        description="URIs of the concept schemes the concept belongs to.",
    )

    annotations: Dict[AnnotationKind, List[Annotation]] = Field(
        default_factory=dict,
        description="Annotations grouped by annotation kind.",
    )

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )


class CollectionData(BaseModel):
    """
    A collection. Members may be concepts or other collections.
    """

    uri: str = Field(..., min_length=1)

    members: List[str] = Field(
        default_factory=list,
        description="URIs of member concepts or nested collections.",
    )

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )


class ThesaurusDocument(BaseModel):
    """
    Root of a JSON thesaurus file.
    """

    schemes: List[str] = Field(default_factory=list)
    collections: List[CollectionData] = Field(default_factory=list)
    concepts: List[ConceptData] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")
