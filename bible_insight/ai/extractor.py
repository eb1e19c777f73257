"""
extractor.py — Recover JSON from free-text LLM completions.

Models are asked for "only the JSON object", but completions still arrive
wrapped in prose, inside ```json fences, with trailing commas, or cut off
mid-object. extract() tries an ordered list of recovery strategies and
stops at the first one that yields a value of the expected shape:

  1. direct            whole completion, fences stripped
  2. bounded_match     first "{" … last "}" (or "[" … "]"), greedy across lines
  3. trimmed_boundary  bounded match cut to its outer brackets, with
                       trailing commas and end-of-line // comments removed
  4. field_recovery    caller-supplied regex recovery (object shape only)
  5. default           caller-supplied default value

The strategies are plain functions ``(raw, shape) -> value | None`` so each
can be tested on its own. extract() never raises for malformed text; it
raises TypeError for non-str input, and ExtractionExhausted only when the
caller passes strict=True.
"""

import copy
import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Literal, Optional

from bible_insight.core.errors import ExtractionExhausted

logger = logging.getLogger(__name__)

Shape = Literal["object", "array"]
Strategy = Callable[[str, Shape], Optional[Any]]
FieldRecovery = Callable[[str], Optional[dict]]


class Tier(str, Enum):
    DIRECT = "direct"
    BOUNDED_MATCH = "bounded_match"
    TRIMMED_BOUNDARY = "trimmed_boundary"
    FIELD_RECOVERY = "field_recovery"
    DEFAULT = "default"


@dataclass(frozen=True)
class ExtractionResult:
    value: Any
    tier: Tier

    @property
    def recovered(self) -> bool:
        """False when the value is the caller's default."""
        return self.tier is not Tier.DEFAULT


# ── Whole-document strategies ─────────────────────────────────────────────────

_BRACKETS: dict[str, tuple[str, str]] = {"object": ("{", "}"), "array": ("[", "]")}
_BOUNDED: dict[str, re.Pattern] = {
    "object": re.compile(r"\{[\s\S]*\}"),
    "array": re.compile(r"\[[\s\S]*\]"),
}

_FENCE_OPEN = re.compile(r"^```[\w+-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?[ \t]*```$")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
# "//" comment at the end of a line, after a JSON token; never inside a string
_LINE_COMMENT = re.compile(r'(?<=[\]}",\d])[ \t]*//[^\n"]*$', re.MULTILINE)


def strip_code_fence(text: str) -> str:
    text = text.strip()
    text = _FENCE_OPEN.sub("", text, count=1)
    text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def _loads(text: str, shape: Shape) -> Optional[Any]:
    try:
        value = json.loads(text)
    except (ValueError, RecursionError):
        return None
    expected = dict if shape == "object" else list
    return value if isinstance(value, expected) else None


def parse_direct(raw: str, shape: Shape) -> Optional[Any]:
    return _loads(strip_code_fence(raw), shape)


def parse_bounded_match(raw: str, shape: Shape) -> Optional[Any]:
    m = _BOUNDED[shape].search(raw)
    if not m:
        return None
    return _loads(m.group(), shape)


def parse_trimmed_boundary(raw: str, shape: Shape) -> Optional[Any]:
    m = _BOUNDED[shape].search(strip_code_fence(raw))
    if not m:
        return None

    opener, closer = _BRACKETS[shape]
    candidate = m.group()
    candidate = candidate[candidate.find(opener): candidate.rfind(closer) + 1]
    candidate = _LINE_COMMENT.sub("", candidate)
    candidate = _TRAILING_COMMA.sub(r"\1", candidate)
    return _loads(candidate, shape)


STRATEGIES: tuple[tuple[Tier, Strategy], ...] = (
    (Tier.DIRECT, parse_direct),
    (Tier.BOUNDED_MATCH, parse_bounded_match),
    (Tier.TRIMMED_BOUNDARY, parse_trimmed_boundary),
)


def extract(
    raw: str,
    shape: Shape = "object",
    *,
    recover: Optional[FieldRecovery] = None,
    default: Any = None,
    strict: bool = False,
) -> ExtractionResult:
    """
    Pull a JSON value of the given shape out of an LLM completion.

    Args:
        raw:     The completion text.
        shape:   "object" or "array".
        recover: Field-level regex recovery, tried after the whole-document
                 strategies (object shape only).
        default: Returned (deep-copied) when nothing parses; {} / [] if None.
        strict:  Raise ExtractionExhausted instead of returning the default.
    """
    if not isinstance(raw, str):
        raise TypeError(f"extract() expects str, got {type(raw).__name__}")
    if shape not in _BRACKETS:
        raise ValueError(f"Unknown shape {shape!r}; expected 'object' or 'array'")

    for tier, strategy in STRATEGIES:
        value = strategy(raw, shape)
        if value is not None:
            logger.debug("Extracted JSON %s via %s", shape, tier.value)
            return ExtractionResult(value=value, tier=tier)
        logger.debug("Extraction tier %s failed", tier.value)

    if recover is not None and shape == "object":
        value = recover(raw)
        if value is not None:
            logger.info("Completion recovered field-by-field (%d chars)", len(raw))
            return ExtractionResult(value=value, tier=Tier.FIELD_RECOVERY)
        logger.debug("Extraction tier %s failed", Tier.FIELD_RECOVERY.value)

    if strict:
        raise ExtractionExhausted()

    logger.warning("No JSON %s recoverable from completion (%d chars) — using default", shape, len(raw))
    if default is None:
        default = {} if shape == "object" else []
    return ExtractionResult(value=copy.deepcopy(default), tier=Tier.DEFAULT)


# ── Topic analysis field recovery ─────────────────────────────────────────────

_STR = r'"((?:[^"\\]|\\.)*)"'
_REFERENCE_TUPLE = re.compile(
    r'"reference"\s*:\s*' + _STR
    + r'(?:\s*,\s*"text"\s*:\s*' + _STR + r')?'
    + r'\s*,\s*"summary"\s*:\s*' + _STR
    + r'\s*,\s*"relevance"\s*:\s*' + _STR
)
_ANALYSIS = re.compile(r'"analysis"\s*:\s*' + _STR)
_MAIN_THEMES = re.compile(r'"mainThemes"\s*:\s*\[([^\]]*)\]')
_QUOTED = re.compile(_STR)

TOPIC_ANALYSIS_DEFAULT: dict = {
    "verseReferences": [],
    "analysis": "Analysis not available.",
    "mainThemes": [],
}


def _unescape(fragment: str) -> str:
    try:
        return json.loads(f'"{fragment}"')
    except ValueError:
        return fragment


def recover_topic_fields(raw: str) -> Optional[dict]:
    """Rebuild a topic-analysis object from whichever fields survive in ``raw``."""
    references = []
    for reference, text, summary, relevance in _REFERENCE_TUPLE.findall(raw):
        item = {
            "reference": _unescape(reference),
            "summary": _unescape(summary),
            "relevance": _unescape(relevance),
        }
        if text:
            item["text"] = _unescape(text)
        references.append(item)

    analysis_m = _ANALYSIS.search(raw)
    themes_m = _MAIN_THEMES.search(raw)
    themes = [_unescape(t) for t in _QUOTED.findall(themes_m.group(1))] if themes_m else []

    if not references and not analysis_m and not themes:
        return None

    return {
        "verseReferences": references,
        "analysis": _unescape(analysis_m.group(1)) if analysis_m else TOPIC_ANALYSIS_DEFAULT["analysis"],
        "mainThemes": themes,
    }


def extract_topic_analysis(raw: str) -> ExtractionResult:
    return extract(raw, "object", recover=recover_topic_fields, default=TOPIC_ANALYSIS_DEFAULT)
