"""
Provider registry: turns a per-call ProviderContext into a ready adapter.

Both failure modes (unknown id, missing credential) are raised before any
adapter is constructed, so no network call happens for a bad context.
"""
import logging
from typing import Dict, Union

from app.core.exceptions import ErrorKind, ProviderError
from app.schemas.generation import ProviderContext, ProviderFamily
from app.services.providers.base import GenerationProvider, TranscriptionProvider
from app.services.providers.generation.anthropic_provider import AnthropicGenerationProvider
from app.services.providers.generation.gemini_provider import GeminiGenerationProvider
from app.services.providers.generation.ollama_provider import OllamaGenerationProvider
from app.services.providers.generation.openai_provider import OpenAIGenerationProvider
from app.services.providers.transcription.aws_transcribe import AWSTranscribeProvider
from app.services.providers.transcription.google_speech import GoogleSpeechProvider
from app.services.providers.transcription.local_whisper import LocalWhisperProvider
from app.services.providers.transcription.openai_whisper import OpenAIWhisperProvider

logger = logging.getLogger(__name__)

GENERATION_PROVIDERS: Dict[str, type] = {
    "openai": OpenAIGenerationProvider,
    "anthropic": AnthropicGenerationProvider,
    "gemini": GeminiGenerationProvider,
    "ollama": OllamaGenerationProvider,
}

TRANSCRIPTION_PROVIDERS: Dict[str, type] = {
    "openai": OpenAIWhisperProvider,
    "google": GoogleSpeechProvider,
    "aws": AWSTranscribeProvider,
    "local": LocalWhisperProvider,
}

CREDENTIAL_FREE = {
    ProviderFamily.GENERATION: frozenset({"ollama"}),
    ProviderFamily.TRANSCRIPTION: frozenset({"local"}),
}

_FAMILY_PROVIDERS = {
    ProviderFamily.GENERATION: GENERATION_PROVIDERS,
    ProviderFamily.TRANSCRIPTION: TRANSCRIPTION_PROVIDERS,
}


def requires_credential(context: ProviderContext) -> bool:
    return context.provider_id not in CREDENTIAL_FREE[context.family]


def resolve(context: ProviderContext) -> Union[GenerationProvider, TranscriptionProvider]:
    """
    Build the adapter named by ``context``.

    Args:
        context: Family, provider id, credential and optional overrides.

    Returns:
        A GenerationProvider or TranscriptionProvider, matching the family.

    Raises:
        ProviderError: INVALID_REQUEST for an unknown id, INVALID_API_KEY when a
            credential-requiring provider has no credential.
    """
    providers = _FAMILY_PROVIDERS[context.family]
    provider_cls = providers.get(context.provider_id)
    if provider_cls is None:
        raise ProviderError(
            ErrorKind.INVALID_REQUEST,
            f"Unknown {context.family.value} provider: {context.provider_id or '(none)'}",
            context.provider_id or "unknown",
        )

    if requires_credential(context) and not (context.credential and context.credential.strip()):
        raise ProviderError(
            ErrorKind.INVALID_API_KEY,
            f"API key required for {context.provider_id}",
            context.provider_id,
        )

    logger.debug(f"Resolved {context.family.value} provider '{context.provider_id}'")
    return provider_cls.from_context(context)
