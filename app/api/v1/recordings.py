import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, status

from app.api.deps import get_job_processor, get_record_store, get_transcription_context
from app.core.exceptions import RecordingNotFoundError
from app.schemas.api import RecordingCreateRequest, TranscriptionAccepted
from app.schemas.generation import ProviderContext
from app.schemas.recording import Recording, TranscriptionStatusView, TranscriptStatus
from app.services.repository import RecordStore
from app.services.transcription.job_processor import TranscriptionJobProcessor

logger = logging.getLogger(__name__)

recordings_router = APIRouter()


@recordings_router.post("/recordings", response_model=Recording, status_code=status.HTTP_201_CREATED)
async def create_recording(
    body: RecordingCreateRequest,
    context: Optional[ProviderContext] = Depends(get_transcription_context),
    store: RecordStore = Depends(get_record_store),
    processor: TranscriptionJobProcessor = Depends(get_job_processor),
):
    """
    Register an already-uploaded recording and start transcription in the
    background when a transcription provider is configured.
    """
    recording = await store.add_recording(Recording(
        id=body.id or str(uuid.uuid4()),
        media_key=body.media_key,
        filename=body.filename,
        duration=body.duration,
    ))
    processor.on_recording_created(recording, context)
    return recording


@recordings_router.post(
    "/recordings/{recording_id}/transcription",
    response_model=TranscriptionAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def process_transcription(
    recording_id: str,
    context: Optional[ProviderContext] = Depends(get_transcription_context),
    store: RecordStore = Depends(get_record_store),
    processor: TranscriptionJobProcessor = Depends(get_job_processor),
):
    recording = await store.get_recording_by_id(recording_id)
    if recording is None:
        raise RecordingNotFoundError(f"Recording {recording_id} not found", details={"recording_id": recording_id})

    processor.dispatch(recording.id, recording.media_key, context)
    return TranscriptionAccepted(
        recording_id=recording.id,
        dispatched=context is not None,
        status=recording.transcript_status,
    )


@recordings_router.post(
    "/recordings/{recording_id}/transcription/retry",
    response_model=TranscriptionAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def retry_transcription(
    recording_id: str,
    context: Optional[ProviderContext] = Depends(get_transcription_context),
    processor: TranscriptionJobProcessor = Depends(get_job_processor),
):
    await processor.retry_transcription(recording_id, context)
    return TranscriptionAccepted(recording_id=recording_id, dispatched=True, status=TranscriptStatus.PENDING)


@recordings_router.get("/recordings/{recording_id}/transcription", response_model=TranscriptionStatusView)
async def get_transcription_status(
    recording_id: str,
    processor: TranscriptionJobProcessor = Depends(get_job_processor),
):
    return await processor.get_transcription_status(recording_id)
