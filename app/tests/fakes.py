"""
Fakes for provider, record store and object storage.

The fakes implement the same async contracts as the real collaborators so the
orchestrator and job pipeline run unmodified against them.
"""
from typing import Dict, List, Optional, Sequence, Union

from app.core.exceptions import StorageError
from app.schemas.generation import Category, GenerationRequest, ProviderContext, RawGeneratedQuestion, Trait
from app.schemas.recording import TranscriptionResult, TranscriptStatus
from app.services.providers.base import generate_questions_with, validate_media_type
from app.services.repository import InMemoryRecordStore


class FakeGenerationProvider:
    """Returns a canned reply (or raises) and remembers every prompt it saw."""

    def __init__(self, reply: Union[str, Exception] = "[]", name: str = "fake", valid: bool = True):
        self.reply = reply
        self._name = name
        self.valid = valid
        self.prompts: List[dict] = []

    @property
    def name(self) -> str:
        return self._name

    async def generate_questions(
        self,
        request: GenerationRequest,
        categories: Sequence[Category] = (),
        traits: Sequence[Trait] = (),
    ) -> List[RawGeneratedQuestion]:
        return await generate_questions_with(self, request, categories, traits)

    async def generate_completion(self, prompt: str, system_prompt: Optional[str] = None, json_mode: bool = False) -> str:
        self.prompts.append({"prompt": prompt, "system_prompt": system_prompt, "json_mode": json_mode})
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply

    async def validate_api_key(self) -> bool:
        return self.valid


class FakeTranscriptionProvider:
    def __init__(self, result: Union[str, Exception] = "hello world", name: str = "fake-stt"):
        self.result = result
        self._name = name
        self.calls: List[tuple] = []

    @property
    def name(self) -> str:
        return self._name

    async def transcribe(self, media: bytes, mime_type: str) -> TranscriptionResult:
        self.calls.append((media, mime_type))
        validate_media_type(mime_type, self._name)
        if isinstance(self.result, Exception):
            raise self.result
        return TranscriptionResult(transcript=self.result)

    async def validate_api_key(self) -> bool:
        return True


class FakeObjectStorage:
    def __init__(self, objects: Optional[Dict[str, bytes]] = None):
        self.objects = objects or {}
        self.downloads: List[str] = []

    async def download_object(self, key: str) -> bytes:
        self.downloads.append(key)
        if key not in self.objects:
            raise StorageError(f"Failed to download object '{key}'")
        return self.objects[key]


class TrackingRecordStore(InMemoryRecordStore):
    """InMemoryRecordStore that keeps every status write, in order."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.status_history: Dict[str, List[TranscriptStatus]] = {}

    async def update_recording_status(self, recording_id: str, status: TranscriptStatus) -> None:
        self.status_history.setdefault(recording_id, []).append(status)
        await super().update_recording_status(recording_id, status)

    async def update_recording_transcript(self, recording_id: str, transcript: str, status: TranscriptStatus) -> None:
        self.status_history.setdefault(recording_id, []).append(status)
        await super().update_recording_transcript(recording_id, transcript, status)


class FailingStatusStore(TrackingRecordStore):
    """Every status write raises, as if the database went away."""

    async def update_recording_status(self, recording_id: str, status: TranscriptStatus) -> None:
        self.status_history.setdefault(recording_id, []).append(status)
        raise RuntimeError("database unavailable")


class RecordingResolver:
    """Stands in for registry.resolve: hands out one provider and logs the contexts it received."""

    def __init__(self, provider):
        self.provider = provider
        self.contexts: List[ProviderContext] = []

    def __call__(self, context: ProviderContext):
        self.contexts.append(context)
        return self.provider
