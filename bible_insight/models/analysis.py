"""
analysis.py — Pydantic models for the AI-backed endpoints.

The front end consumes camelCase keys (relatedVerses, verseReferences,
mainThemes), so the payload models use a camelCase alias generator while
Python code keeps snake_case attributes. Every field has a default: a
completion that only partly matches the schema still produces a
structurally valid response.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bible_insight.ai.providers import AIModel
from bible_insight.models.bible import BibleVerse


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Requests ──────────────────────────────────────────────────────────────────

class VerseAnalysisRequest(BaseModel):
    """Verse submitted for thematic analysis. `verse` is checked by the route (400)."""

    verse: Optional[BibleVerse] = None
    model: Optional[AIModel] = None


class TopicRequest(BaseModel):
    topic: Optional[str] = Field(default=None, max_length=200)
    model: Optional[AIModel] = None


class RelationshipBatchRequest(BaseModel):
    """List of verse references, e.g. ["John 3:16", "Romans 5:8"]; shape checked by the route."""

    verses: Any = None
    model: Optional[AIModel] = None


# ── Verse analysis ────────────────────────────────────────────────────────────

class VerseAnalysis(_CamelModel):
    themes: list[str] = Field(default_factory=list)
    related_verses: list[str] = Field(default_factory=list)
    significance: str = ""
    context: str = ""


# ── Topic analysis ────────────────────────────────────────────────────────────

class TopicVerseReference(BaseModel):
    reference: str
    summary: str = ""
    relevance: str = ""
    text: Optional[str] = None


class TopicAnalysis(_CamelModel):
    verse_references: list[TopicVerseReference] = Field(default_factory=list)
    analysis: str = "Analysis not available."
    main_themes: list[str] = Field(default_factory=list)


# ── Related verses ────────────────────────────────────────────────────────────

class RelatedVerseSuggestion(BaseModel):
    reference: str
    text: str = ""
    relationship_type: str = "THEMATIC"
    strength: Optional[int] = None  # 1–10 as asked of the model; not enforced
    description: str = ""


class RelatedSuggestionsResponse(_CamelModel):
    related_verses: list[RelatedVerseSuggestion] = Field(default_factory=list)


class VerseRelationshipResult(BaseModel):
    """One item of the POST /api/verses/related batch."""

    verse: str
    related: list[str] = Field(default_factory=list)
