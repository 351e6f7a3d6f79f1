import pytest

from app.schemas.generation import ProviderContext, ProviderFamily
from app.schemas.recording import Recording
from app.tests.fakes import FakeObjectStorage, TrackingRecordStore


@pytest.fixture
def store() -> TrackingRecordStore:
    return TrackingRecordStore(recordings=[
        Recording(id="rec-1", media_key="recordings/rec-1.webm"),
        Recording(id="rec-2", media_key="recordings/rec-2.mp3"),
    ])


@pytest.fixture
def storage() -> FakeObjectStorage:
    return FakeObjectStorage({
        "recordings/rec-1.webm": b"webm-bytes",
        "recordings/rec-2.mp3": b"mp3-bytes",
    })


@pytest.fixture
def generation_context() -> ProviderContext:
    return ProviderContext(family=ProviderFamily.GENERATION, provider_id="openai", credential="sk-test-key")


@pytest.fixture
def transcription_context() -> ProviderContext:
    return ProviderContext(family=ProviderFamily.TRANSCRIPTION, provider_id="openai", credential="sk-test-key")
