from typing import Optional

from pydantic import Field

from app.schemas.generation import CamelModel, ProviderFamily, ResumeEntityType
from app.schemas.recording import TranscriptStatus


class ResumeAnalyzeRequest(CamelModel):
    resume_text: str


class ConsolidateRequest(CamelModel):
    old_description: str
    new_description: str


class ConsolidateResponse(CamelModel):
    description: str


class ResumeQuestionsRequest(CamelModel):
    entity_type: ResumeEntityType
    entity_id: str
    description: str
    count: int = 5


class CredentialValidationResponse(CamelModel):
    valid: bool
    family: ProviderFamily
    provider: Optional[str] = None


class RecordingCreateRequest(CamelModel):
    id: Optional[str] = Field(default=None, description="Generated when omitted.")
    media_key: str
    filename: Optional[str] = None
    duration: Optional[float] = None


class TranscriptionAccepted(CamelModel):
    recording_id: str
    dispatched: bool
    status: TranscriptStatus
