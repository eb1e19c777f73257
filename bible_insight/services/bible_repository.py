"""
Read access to the verse tables in Supabase.

Tables:
  bible_verses          id, book, chapter, verse, text, testament
  verse_relationships   source_verse_id → target_verse_id, relationship_type,
                        strength (1–10), description

All queries go through PostgREST via the async supabase-py client. Any
client or API failure, and any row that does not match the models, is
raised as UpstreamProviderError; the route turns it into a generic 500
and the cause is logged here.
"""

import logging
import re
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError
from supabase import AsyncClient

from bible_insight.core.errors import UpstreamProviderError
from bible_insight.models.bible import BibleVerse, RelatedVerse, VerseReference, VerseRelationship

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

VERSES_TABLE = "bible_verses"
RELATIONSHIPS_TABLE = "verse_relationships"
SEARCH_LIMIT = 20

# "John 3:16", "1 John 4:9", "Song of Solomon 2:4", "Genesis 1:1-3" (range keeps the first verse)
_REFERENCE = re.compile(r"^((?:\d\s*)?[A-Za-z]+(?:\s+[A-Za-z]+)*)\s+(\d+):(\d+)(?:-\d+)?$")


def parse_verse_reference(reference: str) -> Optional[VerseReference]:
    m = _REFERENCE.match(reference.strip())
    if not m:
        return None
    try:
        return VerseReference(book=m.group(1).strip(), chapter=int(m.group(2)), verse=int(m.group(3)))
    except ValidationError:
        return None


class BibleRepository:
    """Thin query layer over the Supabase client; one per request."""

    def __init__(self, client: Optional[AsyncClient]) -> None:
        self._client = client

    @property
    def client(self) -> AsyncClient:
        if self._client is None:
            raise UpstreamProviderError("Database unavailable", provider="supabase")
        return self._client

    async def _execute(self, query: Any, action: str) -> list[dict]:
        try:
            response = await query.execute()
        except Exception as exc:
            logger.error("Supabase error while %s: %s", action, exc)
            raise UpstreamProviderError(f"Failed to {action}", provider="supabase") from exc
        return response.data or []

    @staticmethod
    def _parse_rows(model_cls: type[ModelT], rows: list[dict], action: str) -> list[ModelT]:
        """Validate PostgREST rows; a row that breaks the schema fails the whole query."""
        try:
            return [model_cls.model_validate(row) for row in rows]
        except ValidationError as exc:
            logger.error(
                "Unexpected %s row while %s (%d errors): %s",
                model_cls.__name__, action, exc.error_count(), exc.errors()[0]["msg"],
            )
            raise UpstreamProviderError(f"Failed to {action}", provider="supabase") from exc

    async def get_verse_by_reference(self, reference: VerseReference) -> Optional[BibleVerse]:
        rows = await self._execute(
            self.client.table(VERSES_TABLE)
            .select("*")
            .eq("book", reference.book)
            .eq("chapter", reference.chapter)
            .eq("verse", reference.verse)
            .limit(1),
            "fetch verse",
        )
        verses = self._parse_rows(BibleVerse, rows[:1], "fetch verse")
        return verses[0] if verses else None

    async def search_verses_by_text(self, search_text: str, limit: int = SEARCH_LIMIT) -> list[BibleVerse]:
        rows = await self._execute(
            self.client.table(VERSES_TABLE)
            .select("*")
            .text_search("text", search_text, options={"config": "english"})
            .limit(limit),
            "search verses",
        )
        return self._parse_rows(BibleVerse, rows, "search verses")

    async def get_chapter_verses(self, book: str, chapter: int) -> list[BibleVerse]:
        rows = await self._execute(
            self.client.table(VERSES_TABLE)
            .select("*")
            .eq("book", book)
            .eq("chapter", chapter)
            .order("verse"),
            "fetch verses",
        )
        return self._parse_rows(BibleVerse, rows, "fetch verses")

    async def get_related_verses(self, verse_id: int) -> list[RelatedVerse]:
        """Stored relationships from ``verse_id``, joined with the target verse rows."""
        rows = await self._execute(
            self.client.table(RELATIONSHIPS_TABLE).select("*").eq("source_verse_id", verse_id),
            "fetch relationships",
        )
        relationships = self._parse_rows(VerseRelationship, rows, "fetch relationships")
        if not relationships:
            return []

        by_target = {rel.target_verse_id: rel for rel in relationships}
        rows = await self._execute(
            self.client.table(VERSES_TABLE).select("*").in_("id", list(by_target)),
            "fetch related verses",
        )
        verses = self._parse_rows(BibleVerse, rows, "fetch related verses")

        related = []
        for verse in verses:
            rel = by_target.get(verse.id)
            related.append(
                RelatedVerse(
                    **verse.model_dump(),
                    relationship_type=rel.relationship_type if rel else None,
                    strength=rel.strength if rel else None,
                    description=rel.description if rel else None,
                )
            )
        return related
