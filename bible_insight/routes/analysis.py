"""
analysis.py — AI-backed study routes (Gemini / Groq).

Routes:
  POST /api/verses/analyze  — themes, related refs, significance, context
  POST /api/gemini          — same analysis, legacy path; 500 when the
                              completion holds no parseable JSON
  GET  /api/verses/related  — 5–10 related-verse suggestions for a verse id
  POST /api/verses/related  — relationship map for a list of references
                              (one concurrent completion per verse)
  POST /api/verses/topic    — key verses, overview and themes for a topic
  GET  /api/ai-models       — providers the client may pick from

Every AI route spends provider quota, so each consults the injected
FixedWindowRateLimiter: analysis and topic routes per client, the
related-verse routes on the shared GLOBAL key (one batch can fan out
into many completions). A rejection is a 429 with {"error", "retryAfter"}.

Requests may name a provider with "model": "gemini" | "groq"; when
omitted DEFAULT_AI_MODEL is used.

  curl -X POST http://localhost:8000/api/verses/topic \\
    -H 'Content-Type: application/json' \\
    -d '{"topic": "forgiveness"}'
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from bible_insight.ai.providers import AI_MODELS, AIModel, default_model
from bible_insight.core.errors import InvalidRequestError
from bible_insight.core.rate_limit import rate_limit_by_client, rate_limit_global
from bible_insight.models.analysis import (
    RelatedSuggestionsResponse,
    RelationshipBatchRequest,
    TopicAnalysis,
    TopicRequest,
    VerseAnalysis,
    VerseAnalysisRequest,
    VerseRelationshipResult,
)
from bible_insight.services.verse_analysis import (
    analyze_topic,
    analyze_verse,
    map_verse_relationships,
    suggest_related_verses,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


# ── Verse analysis ────────────────────────────────────────────────────────────

@router.post(
    "/api/verses/analyze",
    response_model=VerseAnalysis,
    dependencies=[Depends(rate_limit_by_client)],
)
async def analyze(payload: VerseAnalysisRequest):
    """Thematic analysis of one verse; an unparseable completion yields empty fields."""
    if payload.verse is None:
        raise InvalidRequestError("Verse is required")
    return await analyze_verse(payload.verse, payload.model)


@router.post(
    "/api/gemini",
    response_model=VerseAnalysis,
    dependencies=[Depends(rate_limit_by_client)],
)
async def analyze_legacy(payload: VerseAnalysisRequest):
    """Strict variant kept for older clients: no JSON in the completion → 500."""
    if payload.verse is None:
        raise InvalidRequestError("Verse is required")
    return await analyze_verse(payload.verse, payload.model, strict=True)


# ── Related verses ────────────────────────────────────────────────────────────

@router.get(
    "/api/verses/related",
    response_model=RelatedSuggestionsResponse,
    dependencies=[Depends(rate_limit_global)],
)
async def related_suggestions(id: Optional[str] = None, model: Optional[AIModel] = None):  # noqa: A002
    if not id or not id.strip():
        raise InvalidRequestError("Verse ID is required")
    suggestions = await suggest_related_verses(id.strip(), model)
    return RelatedSuggestionsResponse(related_verses=suggestions)


@router.post(
    "/api/verses/related",
    response_model=list[VerseRelationshipResult],
    dependencies=[Depends(rate_limit_global)],
)
async def related_batch(payload: RelationshipBatchRequest):
    """
    Relationship map for several verses at once.

    Always returns one item per submitted verse, in order; verses whose
    completion failed come back with an empty `related` list.
    """
    if not isinstance(payload.verses, list):
        raise InvalidRequestError("Invalid verses array")

    verses = [str(v) for v in payload.verses]
    return await map_verse_relationships(verses, payload.model)


# ── Topic analysis ────────────────────────────────────────────────────────────

@router.post(
    "/api/verses/topic",
    response_model=TopicAnalysis,
    dependencies=[Depends(rate_limit_by_client)],
)
async def topic(payload: TopicRequest):
    """
    Topic study. Never fails on a malformed completion: recovery falls back
    to field-by-field extraction and finally to an empty analysis.
    """
    if not payload.topic or not payload.topic.strip():
        raise InvalidRequestError("Topic is required")
    return await analyze_topic(payload.topic.strip(), payload.model)


# ── Provider catalogue ────────────────────────────────────────────────────────

@router.get("/api/ai-models")
async def ai_models():
    return {"models": AI_MODELS, "default": default_model().value}
