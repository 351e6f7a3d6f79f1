"""
Capability contracts shared by every provider adapter, plus the helpers the
adapters compose: prompt assembly + parsing for question generation, media
type checks for transcription, and vendor status -> taxonomy mapping.
"""
import logging
from typing import List, Optional, Protocol, Sequence, runtime_checkable

from app.core.config import settings
from app.core.exceptions import ErrorKind, ProviderError
from app.core.prompts import (
    JSON_RESPONSE_INSTRUCTION,
    QUESTIONS_OBJECT_INSTRUCTION,
    generate_questions_prompt,
    generate_system_prompt,
)
from app.schemas.generation import Category, GenerationRequest, RawGeneratedQuestion, Trait
from app.schemas.recording import TranscriptionResult
from app.services.pipeline.job_analyzer import analyze_job_description
from app.services.pipeline.llm_parser import parse_generated_questions

logger = logging.getLogger(__name__)

SUPPORTED_MEDIA_TYPES = frozenset({
    'audio/webm',
    'video/webm',
    'audio/mp4',
    'video/mp4',
    'audio/mpeg',
    'audio/wav',
})

MEDIA_FILENAMES = {
    'audio/webm': 'recording.webm',
    'video/webm': 'recording.webm',
    'audio/mp4': 'recording.m4a',
    'video/mp4': 'recording.mp4',
    'audio/mpeg': 'recording.mp3',
    'audio/wav': 'recording.wav',
}


@runtime_checkable
class GenerationProvider(Protocol):
    """Operations every question-generation provider implements."""

    @property
    def name(self) -> str: ...

    async def generate_questions(
        self,
        request: GenerationRequest,
        categories: Sequence[Category] = (),
        traits: Sequence[Trait] = (),
    ) -> List[RawGeneratedQuestion]: ...

    async def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        json_mode: bool = False,
    ) -> str: ...

    async def validate_api_key(self) -> bool: ...


@runtime_checkable
class TranscriptionProvider(Protocol):
    """Operations every transcription provider implements."""

    @property
    def name(self) -> str: ...

    async def transcribe(self, media: bytes, mime_type: str) -> TranscriptionResult: ...

    async def validate_api_key(self) -> bool: ...


def effective_count(request: GenerationRequest) -> int:
    return request.count if request.count is not None else settings.DEFAULT_QUESTION_COUNT


async def generate_questions_with(
    provider: GenerationProvider,
    request: GenerationRequest,
    categories: Sequence[Category] = (),
    traits: Sequence[Trait] = (),
) -> List[RawGeneratedQuestion]:
    """
    Drive one question-generation round trip through ``provider.generate_completion``.

    Builds the shared system prompt and the request-specific user prompt
    (with job pre-analysis when a job description arrives without categories),
    appends the JSON instruction and parses the reply.

    Args:
        provider: Adapter whose completion call is used.
        request: Validated generation request.
        categories: Canonical categories selected by the request.
        traits: Canonical traits selected by the request.

    Returns:
        Parsed, normalized questions (not yet resolved).
    """
    analysis = None
    if request.has_job_description and not categories:
        analysis = analyze_job_description(request.job_description)
        logger.info(
            f"Job pre-analysis: seniority={analysis.seniority_level}, "
            f"categories={analysis.suggested_categories}, traits={analysis.suggested_traits}"
        )

    user_prompt = generate_questions_prompt(request, effective_count(request), categories, traits, analysis)
    reply = await provider.generate_completion(
        f"{user_prompt}\n\n{JSON_RESPONSE_INSTRUCTION} {QUESTIONS_OBJECT_INSTRUCTION}",
        system_prompt=generate_system_prompt(),
        json_mode=True,
    )
    return parse_generated_questions(reply, provider.name)


def validate_media_type(mime_type: str, provider: str) -> None:
    """Raise INVALID_REQUEST for media types no transcription adapter accepts."""
    if mime_type not in SUPPORTED_MEDIA_TYPES:
        raise ProviderError(ErrorKind.INVALID_REQUEST, f"Unsupported audio format: {mime_type}", provider)


def error_from_status(status: Optional[int], message: Optional[str], provider: str, vendor: str) -> ProviderError:
    """Map a vendor HTTP status onto the shared taxonomy."""
    if status == 401:
        return ProviderError(ErrorKind.INVALID_API_KEY, f"Invalid {vendor} API key", provider)
    if status == 429:
        return ProviderError(ErrorKind.RATE_LIMIT, f"{vendor} rate limit exceeded", provider)
    return ProviderError(ErrorKind.PROVIDER_ERROR, message or f"{vendor} request failed", provider)


def unreachable_error(provider: str, vendor: str, target: Optional[str] = None) -> ProviderError:
    where = f" at {target}" if target else ""
    return ProviderError(
        ErrorKind.PROVIDER_ERROR,
        f"Cannot connect to {vendor}{where}. The service is unreachable; is it running?",
        provider,
    )
