from typing import Optional

from app.core.exceptions import ErrorKind, ProviderError
from app.schemas.generation import ProviderContext
from app.schemas.recording import TranscriptionResult
from app.services.providers.base import validate_media_type

PROVIDER_ID = "aws"


class AWSTranscribeProvider:
    """Registered so the id resolves; transcription itself is not available yet."""

    def __init__(self, api_key: str, model: Optional[str] = None):
        self._api_key = api_key
        self._model = model

    @classmethod
    def from_context(cls, context: ProviderContext) -> "AWSTranscribeProvider":
        return cls(api_key=context.credential, model=context.model)

    @property
    def name(self) -> str:
        return PROVIDER_ID

    async def transcribe(self, media: bytes, mime_type: str) -> TranscriptionResult:
        validate_media_type(mime_type, PROVIDER_ID)
        raise ProviderError(
            ErrorKind.PROVIDER_ERROR,
            "AWS Transcribe transcription is not yet implemented",
            PROVIDER_ID,
        )

    async def validate_api_key(self) -> bool:
        return False
