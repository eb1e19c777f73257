"""
verses.py — Verse lookup routes backed by Supabase.

Routes:
  GET /api/verses?q=                      — full-text search (english config, max 20)
  GET /api/verses/lookup?ref=             — exact "Book Chapter:Verse" lookup
  GET /api/verses/{verse_id}/relationships — stored relationships + target verses (numeric id)
  GET /api/verses/{book}/{chapter}        — whole chapter, ordered by verse

These routes don't touch an LLM, so they use the per-IP slowapi limit
rather than the AI quota.

  curl 'http://localhost:8000/api/verses?q=shepherd'
  curl 'http://localhost:8000/api/verses/John/3'
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from supabase import AsyncClient

from bible_insight.core.database import get_db
from bible_insight.core.errors import InvalidRequestError, NotFoundError
from bible_insight.core.rate_limit import limiter
from bible_insight.models.bible import (
    BibleVerse,
    ChapterNotFoundResponse,
    RelatedVerseListResponse,
    VerseListResponse,
)
from bible_insight.services.bible_repository import BibleRepository, parse_verse_reference

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/verses", tags=["verses"])


def get_repository(db: Optional[AsyncClient] = Depends(get_db)) -> BibleRepository:
    return BibleRepository(db)


@router.get("", response_model=VerseListResponse)
@limiter.limit("60/minute")
async def search_verses(
    request: Request,
    q: Optional[str] = None,
    repo: BibleRepository = Depends(get_repository),
):
    """Full-text search over verse text."""
    if not q or not q.strip():
        raise InvalidRequestError("Query parameter is required")

    verses = await repo.search_verses_by_text(q.strip())
    return VerseListResponse(verses=verses)


@router.get("/lookup", response_model=BibleVerse)
@limiter.limit("60/minute")
async def lookup_verse(
    request: Request,
    ref: Optional[str] = None,
    repo: BibleRepository = Depends(get_repository),
):
    """Single verse by reference, e.g. ?ref=John 3:16."""
    reference = parse_verse_reference(ref or "")
    if reference is None:
        raise InvalidRequestError("Invalid verse reference")

    verse = await repo.get_verse_by_reference(reference)
    if verse is None:
        raise NotFoundError(f"Verse {ref} not found")
    return verse


@router.get("/{verse_id:int}/relationships", response_model=RelatedVerseListResponse)
@limiter.limit("60/minute")
async def verse_relationships(
    request: Request,
    verse_id: int,
    repo: BibleRepository = Depends(get_repository),
):
    """Curated relationships stored in `verse_relationships`."""
    related = await repo.get_related_verses(verse_id)
    return RelatedVerseListResponse(verse_id=verse_id, related=related)


@router.get(
    "/{book}/{chapter}",
    response_model=VerseListResponse,
    responses={404: {"model": ChapterNotFoundResponse}},
)
@limiter.limit("60/minute")
async def chapter_verses(
    request: Request,
    book: str,
    chapter: str,
    repo: BibleRepository = Depends(get_repository),
):
    """All verses of one chapter. 404 carries an empty `verses` list alongside the error."""
    book = book.strip()
    try:
        chapter_num = int(chapter)
    except ValueError:
        chapter_num = None
    if not book or chapter_num is None:
        raise InvalidRequestError("Invalid book or chapter")

    verses = await repo.get_chapter_verses(book, chapter_num)
    if not verses:
        body = ChapterNotFoundResponse(error=f"No verses found for {book} chapter {chapter_num}")
        return JSONResponse(status_code=404, content=body.model_dump())

    return VerseListResponse(verses=verses)
