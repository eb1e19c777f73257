"""
verse_analysis.py — LLM-backed verse, relationship and topic analysis.

Each operation follows the same path:

  build prompt → generate_completion() (Gemini or Groq, bounded timeout)
               → extractor.extract() → validate into a Pydantic model

Provider failures propagate as UpstreamProviderError, except in
map_verse_relationships(), where every verse is its own sub-call: a failed
sub-call is logged and contributes an empty result so the batch always
returns one item per input verse.
"""

import asyncio
import logging
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from bible_insight.ai.extractor import extract, extract_topic_analysis
from bible_insight.ai.providers import AIModel, generate_completion
from bible_insight.core.errors import UpstreamProviderError
from bible_insight.models.analysis import (
    RelatedVerseSuggestion,
    TopicAnalysis,
    TopicVerseReference,
    VerseAnalysis,
    VerseRelationshipResult,
)
from bible_insight.models.bible import BibleVerse

logger = logging.getLogger(__name__)


# ── Prompts ───────────────────────────────────────────────────────────────────

_VERSE_ANALYSIS_PROMPT = """Analyze the following Bible verse:
"{book} {chapter}:{verse} - {text}"

Provide the analysis in the following JSON format:
{{
  "themes": ["theme1", "theme2", "theme3"],
  "relatedVerses": ["verse1", "verse2", "verse3"],
  "significance": "theological significance explanation",
  "context": "historical context explanation"
}}

Only return the JSON object, no other text."""

_RELATED_SUGGESTIONS_PROMPT = """For the Bible verse with ID "{verse_id}", please identify 5-10 other Bible verses that are thematically related.
Format your response as a JSON array of objects, where each object has:
- reference: the verse reference (e.g., "John 3:16")
- text: the verse text
- relationship_type: the type of relationship (e.g., "THEMATIC", "CROSS_REFERENCE")
- strength: a number from 1-10 indicating relationship strength
- description: a brief description of how they relate

Example:
[
  {{
    "reference": "Romans 5:8",
    "text": "But God demonstrates his own love for us in this: While we were still sinners, Christ died for us.",
    "relationship_type": "THEMATIC",
    "strength": 8,
    "description": "Both verses speak about God's sacrificial love"
  }}
]

Only include the JSON array in your response, nothing else."""

_RELATIONSHIP_PROMPT = """For the Bible verse "{verse}", please identify 5-10 other Bible verses that are thematically related.
Format your response as a JSON array of strings, where each string is a verse reference in the format "Book Chapter:Verse".
For example: ["John 3:16", "Romans 5:8", "1 John 4:9"]
Only include the JSON array in your response, nothing else."""

_TOPIC_PROMPT = """Analyze the biblical topic "{topic}" and provide a JSON response with the following structure:
{{
  "verseReferences": [
    {{
      "reference": "Book Chapter:Verse",
      "summary": "Brief explanation of what this verse discusses",
      "relevance": "High/Medium/Low relevance to the topic"
    }}
  ],
  "analysis": "Brief analysis of the biblical perspective on this topic, including key principles, different perspectives, and how understanding evolved (500 words max)",
  "mainThemes": ["theme1", "theme2", "theme3"] // 5-7 main themes
}}

Focus on finding 10-15 most relevant verses. Do not include the full verse text.
Only respond with the JSON object, nothing else."""


def _validate(model_cls: type[BaseModel], data: Any, fallback: BaseModel) -> BaseModel:
    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        logger.warning("%s did not match schema (%d errors) — using fallback", model_cls.__name__, exc.error_count())
        return fallback


def _references(items: list[Any]) -> list[str]:
    """Keep plain reference strings; accept {"reference": ...} objects too."""
    refs = []
    for item in items:
        if isinstance(item, str) and item.strip():
            refs.append(item.strip())
        elif isinstance(item, dict) and isinstance(item.get("reference"), str):
            refs.append(item["reference"])
    return refs


# ── Operations ────────────────────────────────────────────────────────────────

async def analyze_verse(
    verse: BibleVerse,
    model: Optional[AIModel] = None,
    strict: bool = False,
) -> VerseAnalysis:
    """
    Themes, related references, significance and context for one verse.

    With strict=True an unparseable completion raises ExtractionExhausted
    instead of yielding an empty analysis.
    """
    prompt = _VERSE_ANALYSIS_PROMPT.format(
        book=verse.book, chapter=verse.chapter, verse=verse.verse, text=verse.text
    )
    raw = await generate_completion(prompt, model, response_key="verse_analysis")
    result = extract(raw, "object", strict=strict)
    return _validate(VerseAnalysis, result.value, VerseAnalysis())


async def suggest_related_verses(verse_id: str, model: Optional[AIModel] = None) -> list[RelatedVerseSuggestion]:
    prompt = _RELATED_SUGGESTIONS_PROMPT.format(verse_id=verse_id)
    raw = await generate_completion(prompt, model, response_key="related_verses")
    items = extract(raw, "array").value

    suggestions = []
    for item in items:
        try:
            suggestions.append(RelatedVerseSuggestion.model_validate(item))
        except ValidationError:
            logger.debug("Skipping malformed related-verse item: %.80r", item)
    return suggestions


async def _relationships_for(verse: str, model: Optional[AIModel]) -> VerseRelationshipResult:
    prompt = _RELATIONSHIP_PROMPT.format(verse=verse)
    try:
        raw = await generate_completion(prompt, model, response_key="verse_relationships")
    except UpstreamProviderError as exc:
        logger.error("Error getting related verses for %s: %s", verse, exc.__cause__ or exc)
        return VerseRelationshipResult(verse=verse, related=[])

    related = _references(extract(raw, "array").value)
    return VerseRelationshipResult(verse=verse, related=related)


async def map_verse_relationships(
    verses: list[str],
    model: Optional[AIModel] = None,
) -> list[VerseRelationshipResult]:
    """
    One concurrent completion per verse; results keep the input order.

    Never fails as a whole: a failed sub-call yields {verse, related: []}.
    """
    logger.info("Mapping relationships for %d verses", len(verses))
    return list(await asyncio.gather(*(_relationships_for(v, model) for v in verses)))


async def analyze_topic(topic: str, model: Optional[AIModel] = None) -> TopicAnalysis:
    """Key verses, an overview and the main themes for a biblical topic."""
    prompt = _TOPIC_PROMPT.format(topic=topic)
    raw = await generate_completion(prompt, model, response_key="topic_analysis")
    result = extract_topic_analysis(raw)
    logger.info("Topic analysis for %.60r extracted via %s", topic, result.tier.value)

    data = result.value
    if not isinstance(data.get("verseReferences"), list):
        data["verseReferences"] = []

    references = []
    for item in data["verseReferences"]:
        try:
            references.append(TopicVerseReference.model_validate(item))
        except ValidationError:
            logger.debug("Skipping malformed verse reference: %.80r", item)
    data["verseReferences"] = references

    return _validate(TopicAnalysis, data, TopicAnalysis(verse_references=references))
