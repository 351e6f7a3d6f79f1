import logging
from typing import List, Optional, Sequence

import openai
from openai import AsyncOpenAI

from app.core.config import settings
from app.core.exceptions import ErrorKind, ProviderError
from app.schemas.generation import Category, GenerationRequest, ProviderContext, RawGeneratedQuestion, Trait
from app.services.providers.base import error_from_status, generate_questions_with, unreachable_error

logger = logging.getLogger(__name__)

PROVIDER_ID = "openai"


def map_openai_error(error: Exception, provider: str = PROVIDER_ID) -> ProviderError:
    """Translate an ``openai`` SDK exception into the shared taxonomy."""
    if isinstance(error, openai.APITimeoutError):
        return ProviderError(ErrorKind.PROVIDER_ERROR, "OpenAI request timed out", provider)
    if isinstance(error, openai.APIConnectionError):
        return unreachable_error(provider, "OpenAI")
    status = getattr(error, "status_code", None)
    message = getattr(error, "message", None) or str(error)
    return error_from_status(status, message, provider, "OpenAI")


class OpenAIGenerationProvider:
    """Chat-completions backed question generation."""

    def __init__(self, api_key: str, model: Optional[str] = None, client: Optional[AsyncOpenAI] = None):
        self._client = client or AsyncOpenAI(api_key=api_key, timeout=settings.PROVIDER_HTTP_TIMEOUT)
        self._model = model or settings.OPENAI_MODEL

    @classmethod
    def from_context(cls, context: ProviderContext) -> "OpenAIGenerationProvider":
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
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs = {}
        if json_mode:
            # json_object mode never returns a bare array; the prompt asks for a "questions" wrapper
            kwargs["response_format"] = {"type": "json_object"}

        logger.info(f"OpenAI completion request (model={self._model}, json_mode={json_mode})")
        try:
            completion = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=settings.GENERATION_TEMPERATURE,
                max_tokens=settings.GENERATION_MAX_TOKENS,
                **kwargs,
            )
        except openai.OpenAIError as e:
            raise map_openai_error(e) from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise ProviderError(ErrorKind.PROVIDER_ERROR, "No response from OpenAI", PROVIDER_ID)
        return content

    async def validate_api_key(self) -> bool:
        try:
            await self._client.models.list()
            return True
        except openai.OpenAIError as e:
            logger.info(f"OpenAI credential check failed: {e}")
            return False
