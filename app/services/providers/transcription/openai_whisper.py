import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from app.core.config import settings
from app.core.exceptions import ErrorKind, ProviderError
from app.schemas.generation import ProviderContext
from app.schemas.recording import TranscriptionResult
from app.services.providers.base import MEDIA_FILENAMES, validate_media_type
from app.services.providers.generation.openai_provider import map_openai_error

logger = logging.getLogger(__name__)

PROVIDER_ID = "openai"


class OpenAIWhisperProvider:
    """Hosted Whisper transcription through the OpenAI audio API."""

    def __init__(self, api_key: str, model: Optional[str] = None, client: Optional[AsyncOpenAI] = None):
        self._client = client or AsyncOpenAI(api_key=api_key, timeout=settings.PROVIDER_HTTP_TIMEOUT)
        self._model = model or settings.WHISPER_MODEL

    @classmethod
    def from_context(cls, context: ProviderContext) -> "OpenAIWhisperProvider":
        return cls(api_key=context.credential, model=context.model)

    @property
    def name(self) -> str:
        return PROVIDER_ID

    async def transcribe(self, media: bytes, mime_type: str) -> TranscriptionResult:
        validate_media_type(mime_type, PROVIDER_ID)

        logger.info(f"Whisper transcription request ({len(media)} bytes, {mime_type})")
        try:
            transcription = await self._client.audio.transcriptions.create(
                file=(MEDIA_FILENAMES[mime_type], media, mime_type),
                model=self._model,
                language=settings.WHISPER_LANGUAGE,
                response_format="json",
            )
        except openai.OpenAIError as e:
            raise map_openai_error(e, PROVIDER_ID) from e

        text = getattr(transcription, "text", None)
        if text is None:
            raise ProviderError(ErrorKind.PROVIDER_ERROR, "No transcript returned by OpenAI Whisper", PROVIDER_ID)
        # The json response format carries no confidence or duration
        return TranscriptionResult(transcript=text)

    async def validate_api_key(self) -> bool:
        try:
            await self._client.models.list()
            return True
        except openai.OpenAIError as e:
            logger.info(f"OpenAI Whisper credential check failed: {e}")
            return False
