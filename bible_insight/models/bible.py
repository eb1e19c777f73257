"""
bible.py — Pydantic models for verses stored in Supabase.

Field names mirror the `bible_verses` and `verse_relationships` columns so
rows can be validated straight from PostgREST responses.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

Testament = Literal["old", "new"]

RelationshipType = Literal[
    "thematic",
    "direct_reference",
    "linguistic",
    "chronological",
    "theological",
]


class BibleVerse(BaseModel):
    """One row of `bible_verses`."""

    id: Optional[int] = None
    book: str
    chapter: int
    verse: int
    text: str
    testament: Optional[Testament] = None


class VerseReference(BaseModel):
    """Parsed "Book Chapter:Verse" reference."""

    book: str
    chapter: int = Field(..., ge=1)
    verse: int = Field(..., ge=1)


class VerseRelationship(BaseModel):
    """One row of `verse_relationships`."""

    id: Optional[int] = None
    source_verse_id: int
    target_verse_id: int
    relationship_type: RelationshipType
    strength: int = Field(..., ge=1, le=10)
    description: Optional[str] = None


class RelatedVerse(BibleVerse):
    """A target verse joined with the relationship that points at it."""

    relationship_type: Optional[RelationshipType] = None
    strength: Optional[int] = None
    description: Optional[str] = None


# ── Responses ─────────────────────────────────────────────────────────────────

class VerseListResponse(BaseModel):
    verses: list[BibleVerse]


class ChapterNotFoundResponse(BaseModel):
    verses: list[BibleVerse] = Field(default_factory=list)
    error: str


class RelatedVerseListResponse(BaseModel):
    verse_id: int
    related: list[RelatedVerse]
