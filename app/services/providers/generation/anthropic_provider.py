import logging
from typing import List, Optional, Sequence

import anthropic
from anthropic import AsyncAnthropic

from app.core.config import settings
from app.core.exceptions import ErrorKind, ProviderError
from app.schemas.generation import Category, GenerationRequest, ProviderContext, RawGeneratedQuestion, Trait
from app.services.providers.base import error_from_status, generate_questions_with, unreachable_error

logger = logging.getLogger(__name__)

PROVIDER_ID = "anthropic"


def map_anthropic_error(error: Exception, provider: str = PROVIDER_ID) -> ProviderError:
    """Translate an ``anthropic`` SDK exception into the shared taxonomy."""
    if isinstance(error, anthropic.APITimeoutError):
        return ProviderError(ErrorKind.PROVIDER_ERROR, "Anthropic request timed out", provider)
    if isinstance(error, anthropic.APIConnectionError):
        return unreachable_error(provider, "Anthropic")
    status = getattr(error, "status_code", None)
    message = getattr(error, "message", None) or str(error)
    return error_from_status(status, message, provider, "Anthropic")


class AnthropicGenerationProvider:
    """Messages API backed question generation.

    Anthropic has no JSON response mode, so ``json_mode`` relies on the prompt's
    JSON instruction and the tolerant parser.
    """

    def __init__(self, api_key: str, model: Optional[str] = None, client: Optional[AsyncAnthropic] = None):
        self._client = client or AsyncAnthropic(api_key=api_key, timeout=settings.PROVIDER_HTTP_TIMEOUT)
        self._model = model or settings.ANTHROPIC_MODEL

    @classmethod
    def from_context(cls, context: ProviderContext) -> "AnthropicGenerationProvider":
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
        kwargs = {}
        if system_prompt:
            kwargs["system"] = system_prompt

        logger.info(f"Anthropic completion request (model={self._model})")
        try:
            message = await self._client.messages.create(
                model=self._model,
                max_tokens=settings.GENERATION_MAX_TOKENS,
                temperature=settings.GENERATION_TEMPERATURE,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except anthropic.AnthropicError as e:
            raise map_anthropic_error(e) from e

        text = "".join(block.text for block in message.content if getattr(block, "type", None) == "text")
        if not text:
            raise ProviderError(ErrorKind.PROVIDER_ERROR, "Unexpected response type from Anthropic", PROVIDER_ID)
        return text

    async def validate_api_key(self) -> bool:
        # Smallest possible call on the cheapest model
        try:
            await self._client.messages.create(
                model=settings.ANTHROPIC_VALIDATION_MODEL,
                max_tokens=10,
                messages=[{"role": "user", "content": "Hi"}],
            )
            return True
        except anthropic.AnthropicError as e:
            logger.info(f"Anthropic credential check failed: {e}")
            return False
