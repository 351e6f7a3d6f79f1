import logging
from typing import Optional

import httpx

from app.core.config import settings
from app.core.exceptions import ErrorKind, ProviderError
from app.schemas.generation import ProviderContext
from app.schemas.recording import TranscriptionResult
from app.services.providers.base import MEDIA_FILENAMES, error_from_status, validate_media_type

logger = logging.getLogger(__name__)

PROVIDER_ID = "local"


class LocalWhisperProvider:
    """
    Self-hosted Whisper server exposing the OpenAI-compatible
    ``/v1/audio/transcriptions`` route (faster-whisper-server, whisper.cpp
    server, LocalAI). A credential is optional and sent as a bearer token.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._endpoint = (endpoint or settings.LOCAL_WHISPER_ENDPOINT).rstrip("/")
        self._model = model or settings.LOCAL_WHISPER_MODEL
        self._api_key = api_key
        self._transport = transport

    @classmethod
    def from_context(cls, context: ProviderContext) -> "LocalWhisperProvider":
        return cls(endpoint=context.endpoint, model=context.model, api_key=context.credential)

    @property
    def name(self) -> str:
        return PROVIDER_ID

    def _client(self) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else None
        return httpx.AsyncClient(
            base_url=self._endpoint,
            headers=headers,
            timeout=settings.PROVIDER_HTTP_TIMEOUT,
            transport=self._transport,
        )

    async def transcribe(self, media: bytes, mime_type: str) -> TranscriptionResult:
        validate_media_type(mime_type, PROVIDER_ID)

        files = {"file": (MEDIA_FILENAMES[mime_type], media, mime_type)}
        data = {"model": self._model, "language": settings.WHISPER_LANGUAGE, "response_format": "json"}

        logger.info(f"Local Whisper transcription request to {self._endpoint} ({len(media)} bytes)")
        try:
            async with self._client() as client:
                response = await client.post("/v1/audio/transcriptions", files=files, data=data)
                response.raise_for_status()
                payload = response.json()
        except httpx.ConnectError as e:
            raise ProviderError(
                ErrorKind.PROVIDER_ERROR,
                f"Cannot connect to Whisper server at {self._endpoint}. Is it running?",
                PROVIDER_ID,
            ) from e
        except httpx.HTTPStatusError as e:
            raise error_from_status(
                e.response.status_code, f"Whisper server error: {e.response.text}", PROVIDER_ID, "Whisper server"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderError(ErrorKind.PROVIDER_ERROR, f"Whisper server error: {e}", PROVIDER_ID) from e

        text = payload.get("text") if isinstance(payload, dict) else None
        if text is None:
            raise ProviderError(ErrorKind.PROVIDER_ERROR, "No transcript returned by Whisper server", PROVIDER_ID)
        return TranscriptionResult(transcript=text.strip(), duration=payload.get("duration"))

    async def validate_api_key(self) -> bool:
        """Reachability check; any HTTP answer from the server counts."""
        try:
            async with self._client() as client:
                await client.get("/")
            return True
        except httpx.HTTPError as e:
            logger.info(f"Whisper server not reachable at {self._endpoint}: {e}")
            return False
