"""
GroqClient — Async wrapper around the Groq chat-completions SDK.

Same contract as GeminiClient: generate(prompt, response_key) -> str,
with MOCK mode when AI_MOCK_MODE is set or GROQ_API_KEY is missing.
Groq serves open-weight models with very low latency; the model id is
configurable via GROQ_MODEL (run scripts/list_groq_models.py to see
what the account can use).
"""

import logging
from typing import Any

from groq import AsyncGroq

from bible_insight.ai.mock_responses import MOCK_RESPONSES
from bible_insight.core.config import settings

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = "You are a careful Bible scholar. When asked for JSON, output strict JSON only."


class GroqClient:
    """Groq interface; use the module-level `groq_client` singleton."""

    name = "groq"

    def __init__(self) -> None:
        self.mock_mode = settings.ai_mock_mode
        self.model_name = settings.groq_model

        if not self.mock_mode:
            if not settings.groq_api_key:
                logger.warning(
                    "GROQ_API_KEY not set — falling back to mock mode. "
                    "Set AI_MOCK_MODE=true to silence this warning."
                )
                self.mock_mode = True
            else:
                self._client = AsyncGroq(api_key=settings.groq_api_key)

        if self.mock_mode:
            logger.info("GroqClient initialised in MOCK mode")
        else:
            logger.info("GroqClient initialised in REAL mode (model: %s)", self.model_name)

    async def generate(
        self,
        prompt: str,
        response_key: str = "default",
        **completion_kwargs: Any,
    ) -> str:
        """
        Generate text from the configured Groq model.

        Raises:
            Exception: Propagates Groq SDK errors in real mode.
        """
        if self.mock_mode:
            return MOCK_RESPONSES.get(response_key, MOCK_RESPONSES["default"])

        try:
            response = await self._client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": _SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=completion_kwargs.pop("temperature", 0.3),
                **completion_kwargs,
            )
            return response.choices[0].message.content or ""
        except Exception as exc:
            logger.error("Groq API error (model=%s): %s", self.model_name, exc)
            raise


# Module-level singleton
groq_client = GroqClient()
