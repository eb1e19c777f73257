"""
Provider selection and the single outbound-completion entry point.

Every service calls generate_completion() rather than a client directly:
it picks Gemini or Groq, bounds the call with a timeout, and converts any
SDK failure into UpstreamProviderError so the route layer returns a
generic 500 while the real cause is logged.
"""

import asyncio
import logging
from enum import Enum

from bible_insight.ai.gemini_client import gemini_client
from bible_insight.ai.groq_client import groq_client
from bible_insight.core.config import settings
from bible_insight.core.errors import UpstreamProviderError

logger = logging.getLogger(__name__)


class AIModel(str, Enum):
    GEMINI = "gemini"
    GROQ = "groq"


# Shown by GET /api/ai-models so the front end can render a picker.
AI_MODELS: list[dict[str, str]] = [
    {
        "id": AIModel.GEMINI.value,
        "name": "Gemini",
        "description": "Google's latest AI model",
        "icon": "🤖",
    },
    {
        "id": AIModel.GROQ.value,
        "name": "Groq",
        "description": "Ultra-fast inference",
        "icon": "⚡",
    },
]


def default_model() -> AIModel:
    try:
        return AIModel(settings.default_ai_model.lower())
    except ValueError:
        logger.warning("Unknown DEFAULT_AI_MODEL=%r, using gemini", settings.default_ai_model)
        return AIModel.GEMINI


def get_client(model: AIModel):
    return groq_client if model is AIModel.GROQ else gemini_client


async def generate_completion(
    prompt: str,
    model: AIModel | None = None,
    response_key: str = "default",
) -> str:
    """
    Run one completion against the chosen provider.

    Raises:
        UpstreamProviderError: the provider raised, or didn't answer within
            settings.llm_timeout_seconds.
    """
    model = model or default_model()
    client = get_client(model)

    try:
        return await asyncio.wait_for(
            client.generate(prompt, response_key=response_key),
            timeout=settings.llm_timeout_seconds,
        )
    except asyncio.TimeoutError as exc:
        logger.error("%s completion timed out after %.1fs", model.value, settings.llm_timeout_seconds)
        raise UpstreamProviderError("AI provider timed out", provider=model.value) from exc
    except Exception as exc:
        raise UpstreamProviderError("AI provider request failed", provider=model.value) from exc
