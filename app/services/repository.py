"""
Record store contract used by the orchestrator and the transcription pipeline,
plus an in-memory implementation seeded with the built-in taxonomy.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Protocol

from app.core.prompts import CATEGORY_PROMPT_DETAILS, TRAIT_PROMPT_DETAILS
from app.schemas.generation import Category, Trait
from app.schemas.recording import Recording, TranscriptStatus

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    async def get_categories(self) -> List[Category]: ...

    async def get_traits(self) -> List[Trait]: ...

    async def add_recording(self, recording: Recording) -> Recording: ...

    async def get_recording_by_id(self, recording_id: str) -> Optional[Recording]: ...

    async def update_recording_status(self, recording_id: str, status: TranscriptStatus) -> None: ...

    async def update_recording_transcript(
        self, recording_id: str, transcript: str, status: TranscriptStatus
    ) -> None: ...


def _slug(name: str) -> str:
    return name.lower().replace(' ', '-')


def default_categories() -> List[Category]:
    return [
        Category(id=f"cat-{_slug(name)}", name=name, description=detail)
        for name, detail in CATEGORY_PROMPT_DETAILS.items()
    ]


def default_traits() -> List[Trait]:
    return [
        Trait(id=f"trait-{_slug(name)}", name=name, description=detail)
        for name, detail in TRAIT_PROMPT_DETAILS.items()
    ]


class InMemoryRecordStore:
    """Process-local RecordStore; contents are lost on restart."""

    def __init__(
        self,
        categories: Optional[Iterable[Category]] = None,
        traits: Optional[Iterable[Trait]] = None,
        recordings: Optional[Iterable[Recording]] = None,
    ):
        self._categories = list(categories) if categories is not None else default_categories()
        self._traits = list(traits) if traits is not None else default_traits()
        self._recordings: Dict[str, Recording] = {r.id: r for r in recordings or []}
        self._lock = asyncio.Lock()

    async def get_categories(self) -> List[Category]:
        return list(self._categories)

    async def get_traits(self) -> List[Trait]:
        return list(self._traits)

    async def add_recording(self, recording: Recording) -> Recording:
        async with self._lock:
            self._recordings[recording.id] = recording
        return recording

    async def get_recording_by_id(self, recording_id: str) -> Optional[Recording]:
        recording = self._recordings.get(recording_id)
        return recording.model_copy() if recording else None

    async def update_recording_status(self, recording_id: str, status: TranscriptStatus) -> None:
        async with self._lock:
            recording = self._recordings.get(recording_id)
            if recording is None:
                logger.warning(f"Status update for unknown recording {recording_id}")
                return
            self._recordings[recording_id] = recording.model_copy(update={"transcript_status": status})

    async def update_recording_transcript(
        self, recording_id: str, transcript: str, status: TranscriptStatus
    ) -> None:
        async with self._lock:
            recording = self._recordings.get(recording_id)
            if recording is None:
                logger.warning(f"Transcript update for unknown recording {recording_id}")
                return
            self._recordings[recording_id] = recording.model_copy(update={
                "transcript": transcript,
                "transcript_status": status,
                "transcribed_at": datetime.now(timezone.utc),
            })
