"""
Asynchronous transcription jobs for recordings.

State machine stored on the Recording:

    NONE -> PENDING -> PROCESSING -> COMPLETED
                 \\            \\
                  -> FAILED     -> FAILED

Jobs are in-process tasks: nothing is queued durably, there is no concurrency
cap and a job lost to a restart stays in its last written state.
"""
import asyncio
import logging
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, Optional, Set

from app.core.exceptions import ErrorKind, ProviderError, RecordingNotFoundError
from app.core.logger import log_async_execution_time
from app.schemas.generation import ProviderContext, ProviderFamily
from app.schemas.recording import Recording, TranscriptionStatusView, TranscriptStatus
from app.services.providers.registry import requires_credential, resolve
from app.services.repository import RecordStore
from app.services.storage import ObjectStorage

logger = logging.getLogger(__name__)

EXTENSION_MIME_TYPES = {
    '.webm': 'video/webm',
    '.mp4': 'video/mp4',
    '.mp3': 'audio/mpeg',
    '.wav': 'audio/wav',
}
DEFAULT_MIME_TYPE = 'video/webm'


def mime_type_for_key(media_key: str) -> str:
    """Infer the media type from the object key's extension."""
    return EXTENSION_MIME_TYPES.get(PurePosixPath(media_key).suffix.lower(), DEFAULT_MIME_TYPE)


def _is_configured(context: Optional[ProviderContext]) -> bool:
    if context is None or not context.provider_id:
        return False
    if requires_credential(context) and not (context.credential and context.credential.strip()):
        return False
    return True


class TranscriptionJobProcessor:
    """Runs transcription jobs and records their progress in the record store."""

    def __init__(
        self,
        store: RecordStore,
        storage: ObjectStorage,
        resolver: Callable[[ProviderContext], Any] = resolve,
    ):
        self.store = store
        self.storage = storage
        self.resolver = resolver
        self._tasks: Set[asyncio.Task] = set()
        # Last context per recording, in memory only, so a retry can reuse it
        self._contexts: Dict[str, ProviderContext] = {}

    @log_async_execution_time
    async def process_recording(
        self,
        recording_id: str,
        media_key: str,
        context: Optional[ProviderContext],
    ) -> None:
        """
        Transcribe one recording and persist the outcome.

        A missing provider or credential writes NONE and stops. Once the job
        starts every failure, the PENDING write included, ends in FAILED and
        is logged, never raised: the caller is a detached task. The provider
        is resolved before the media is downloaded, so an unknown provider id
        fails without touching storage.
        """
        if not _is_configured(context):
            logger.info(f"Transcription not configured; recording {recording_id} set to NONE")
            try:
                await self.store.update_recording_status(recording_id, TranscriptStatus.NONE)
            except Exception as store_error:
                logger.error(f"Could not mark recording {recording_id} as NONE: {store_error}")
            return

        try:
            await self.store.update_recording_status(recording_id, TranscriptStatus.PENDING)
            provider = self.resolver(context)
            media = await self.storage.download_object(media_key)

            await self.store.update_recording_status(recording_id, TranscriptStatus.PROCESSING)
            mime_type = mime_type_for_key(media_key)
            logger.info(
                f"Transcribing recording {recording_id} with {provider.name} ({len(media)} bytes, {mime_type})"
            )
            result = await provider.transcribe(media, mime_type)

            await self.store.update_recording_transcript(recording_id, result.transcript, TranscriptStatus.COMPLETED)
            logger.info(f"Transcription completed for recording {recording_id}")
        except Exception as e:
            logger.error(f"Transcription failed for recording {recording_id}: {e}", exc_info=True)
            try:
                await self.store.update_recording_status(recording_id, TranscriptStatus.FAILED)
            except Exception as store_error:
                logger.error(f"Could not mark recording {recording_id} as FAILED: {store_error}")

    def dispatch(
        self,
        recording_id: str,
        media_key: str,
        context: Optional[ProviderContext],
    ) -> asyncio.Task:
        """Start a transcription job in the background and return its task."""
        if context is not None:
            self._contexts[recording_id] = context

        task = asyncio.create_task(
            self.process_recording(recording_id, media_key, context),
            name=f"transcribe-{recording_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def on_recording_created(self, recording: Recording, context: Optional[ProviderContext]) -> asyncio.Task:
        return self.dispatch(recording.id, recording.media_key, context)

    async def retry_transcription(
        self,
        recording_id: str,
        context: Optional[ProviderContext] = None,
    ) -> asyncio.Task:
        """
        Re-run transcription for an existing recording from PENDING.

        Args:
            recording_id: The recording to retry.
            context: Provider selection; falls back to the last one seen for this recording.

        Raises:
            RecordingNotFoundError: If the recording does not exist.
            ProviderError: INVALID_REQUEST when no usable context is available.
        """
        recording = await self.store.get_recording_by_id(recording_id)
        if recording is None:
            raise RecordingNotFoundError(f"Recording {recording_id} not found", details={"recording_id": recording_id})

        effective = context or self._contexts.get(recording_id)
        if not _is_configured(effective):
            raise ProviderError(
                ErrorKind.INVALID_REQUEST,
                "Transcription not configured",
                effective.provider_id if effective and effective.provider_id else "unknown",
            )
        if effective.family != ProviderFamily.TRANSCRIPTION:
            raise ProviderError(
                ErrorKind.INVALID_REQUEST,
                f"Expected a transcription provider context, got {effective.family.value}",
                effective.provider_id,
            )

        logger.info(f"Retrying transcription for recording {recording_id} (previous status {recording.transcript_status.value})")
        return self.dispatch(recording_id, recording.media_key, effective)

    async def get_transcription_status(self, recording_id: str) -> TranscriptionStatusView:
        recording = await self.store.get_recording_by_id(recording_id)
        if recording is None:
            raise RecordingNotFoundError(f"Recording {recording_id} not found", details={"recording_id": recording_id})
        return TranscriptionStatusView(
            recording_id=recording.id,
            status=recording.transcript_status,
            transcript=recording.transcript,
            transcribed_at=recording.transcribed_at,
        )

    async def wait_for_pending(self) -> None:
        """Await every in-flight job; used on shutdown and in tests."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
