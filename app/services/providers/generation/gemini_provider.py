import logging
from typing import List, Optional, Sequence

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from app.core.config import settings
from app.core.exceptions import ErrorKind, ProviderError
from app.schemas.generation import Category, GenerationRequest, ProviderContext, RawGeneratedQuestion, Trait
from app.services.providers.base import generate_questions_with, unreachable_error

logger = logging.getLogger(__name__)

PROVIDER_ID = "gemini"


def map_gemini_error(error: Exception, provider: str = PROVIDER_ID) -> ProviderError:
    """Translate a google-genai failure into the shared taxonomy."""
    if isinstance(error, httpx.TimeoutException):
        return ProviderError(ErrorKind.PROVIDER_ERROR, "Gemini request timed out", provider)
    if isinstance(error, httpx.TransportError):
        return unreachable_error(provider, "Gemini")

    code = getattr(error, "code", None)
    text = str(error)
    if code in (401, 403) or "API_KEY_INVALID" in text:
        return ProviderError(ErrorKind.INVALID_API_KEY, "Invalid Gemini API key", provider)
    if code == 429 or "RESOURCE_EXHAUSTED" in text:
        return ProviderError(ErrorKind.RATE_LIMIT, "Gemini rate limit exceeded", provider)
    return ProviderError(ErrorKind.PROVIDER_ERROR, getattr(error, "message", None) or text, provider)


class GeminiGenerationProvider:
    """google-genai backed question generation using the async client surface."""

    def __init__(self, api_key: str, model: Optional[str] = None, client: Optional[genai.Client] = None):
        self._client = client or genai.Client(api_key=api_key)
        self._model = model or settings.GEMINI_MODEL

    @classmethod
    def from_context(cls, context: ProviderContext) -> "GeminiGenerationProvider":
        return cls(api_key=context.credential, model=context.model)

    @property
    def name(self) -> str:
        return PROVIDER_ID

    async def generate_questions(
        self,
        request: GenerationRequest,
        categories: Sequence[Category] = (),
        traits: Sequence[Trait] = (),
    ) -> List[RawGeneratedQuestion]:
        return await generate_questions_with(self, request, categories, traits)

    async def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        json_mode: bool = False,
    ) -> str:
        config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=settings.GENERATION_TEMPERATURE,
            max_output_tokens=settings.GENERATION_MAX_TOKENS,
            response_mime_type="application/json" if json_mode else None,
        )

        logger.info(f"Gemini completion request (model={self._model}, json_mode={json_mode})")
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=config,
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise map_gemini_error(e) from e

        if not response.text:
            raise ProviderError(ErrorKind.PROVIDER_ERROR, "No response from Gemini", PROVIDER_ID)
        return response.text

    async def validate_api_key(self) -> bool:
        try:
            await self._client.aio.models.generate_content(
                model=self._model,
                contents="Test",
                config=types.GenerateContentConfig(max_output_tokens=10),
            )
            return True
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.info(f"Gemini credential check failed: {e}")
            return False
