"""
GeminiClient — completions from Google's Gemini models.

With AI_MOCK_MODE on (the default), or when GEMINI_API_KEY is empty, every
call answers from MOCK_RESPONSES[response_key], so local runs and the test
suite never reach Google. Otherwise the prompt goes to GEMINI_MODEL through
google-generativeai's async API.
"""

import logging
import os
from typing import Any

# google-generativeai pulls in protobuf; its C extension fails to load on
# some interpreters, the pure-Python backend always works.
os.environ.setdefault("PROTOCOL_BUFFERS_PYTHON_IMPLEMENTATION", "python")

import google.generativeai as genai

from bible_insight.ai.mock_responses import MOCK_RESPONSES
from bible_insight.core.config import settings

logger = logging.getLogger(__name__)


class GeminiClient:
    """Gemini provider; shared through the `gemini_client` singleton below."""

    name = "gemini"

    def __init__(self) -> None:
        self.model_name = settings.gemini_model
        self.mock_mode = settings.ai_mock_mode or not settings.gemini_api_key

        if not settings.ai_mock_mode and not settings.gemini_api_key:
            logger.warning("AI_MOCK_MODE is off but GEMINI_API_KEY is empty; Gemini answers with mock text")

        if not self.mock_mode:
            genai.configure(api_key=settings.gemini_api_key)
            self._genai = genai

        logger.info("Gemini provider ready (%s)", "mock" if self.mock_mode else self.model_name)

    async def generate(self, prompt: str, response_key: str = "default", **generation_kwargs: Any) -> str:
        """
        Return the completion text for ``prompt``.

        ``response_key`` selects the canned answer in mock mode and is
        ignored otherwise. Extra keyword arguments reach
        ``generate_content_async`` untouched. SDK errors are logged and
        re-raised; generate_completion() wraps them for the routes.
        """
        if self.mock_mode:
            return MOCK_RESPONSES.get(response_key, MOCK_RESPONSES["default"])

        model = self._genai.GenerativeModel(self.model_name)
        try:
            response = await model.generate_content_async(prompt, **generation_kwargs)
        except Exception as exc:
            logger.error("Gemini request to %s failed: %s", self.model_name, exc)
            raise
        return response.text


gemini_client = GeminiClient()
