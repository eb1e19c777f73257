"""
bible.py — Chapter text proxied from bible-api.com.

Route:
  GET /bible/{book}/{chapter} — passes the bible-api.com JSON through as-is.

Works without Supabase, which makes it the fallback reader for chapters
not yet loaded into the `bible_verses` table.
"""

import logging

from fastapi import APIRouter, Request

from bible_insight.core.errors import InvalidRequestError
from bible_insight.core.rate_limit import limiter
from bible_insight.services.bible_api import bible_api_adapter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bible", tags=["bible"])


@router.get("/{book}/{chapter}")
@limiter.limit("60/minute")
async def read_chapter(request: Request, book: str, chapter: str):
    try:
        chapter_num = int(chapter)
    except ValueError:
        raise InvalidRequestError("Invalid chapter number")

    return await bible_api_adapter.get_chapter(book, chapter_num)
