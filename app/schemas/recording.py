from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import Field

from app.schemas.generation import CamelModel


class TranscriptStatus(str, Enum):
    """Transcription state stored on a Recording. Values round-trip on the wire as-is."""
    NONE = "NONE"
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (TranscriptStatus.COMPLETED, TranscriptStatus.FAILED)


class Recording(CamelModel):
    id: str
    media_key: str
    filename: Optional[str] = None
    duration: Optional[float] = None
    transcript: Optional[str] = None
    transcript_status: TranscriptStatus = TranscriptStatus.NONE
    transcribed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TranscriptionResult(CamelModel):
    transcript: str
    confidence: Optional[float] = None
    duration: Optional[float] = None


class TranscriptionStatusView(CamelModel):
    """API view of a recording's transcription state."""
    recording_id: str
    status: TranscriptStatus
    transcript: Optional[str] = None
    transcribed_at: Optional[datetime] = None
