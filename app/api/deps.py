from typing import Optional

from fastapi import Header, Request

from app.schemas.generation import ProviderContext, ProviderFamily
from app.services.pipeline.question_pipeline import QuestionGenerationService
from app.services.pipeline.resume_processor import ResumeProcessor
from app.services.repository import RecordStore
from app.services.transcription.job_processor import TranscriptionJobProcessor


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def get_generation_context(
    x_llm_provider: Optional[str] = Header(default=None),
    x_llm_api_key: Optional[str] = Header(default=None),
    x_llm_model: Optional[str] = Header(default=None),
    x_llm_endpoint: Optional[str] = Header(default=None),
) -> ProviderContext:
    """
    Per-request generation provider selection from X-LLM-* headers.
    A missing provider header yields an empty id, which the registry rejects.
    """
    return ProviderContext(
        family=ProviderFamily.GENERATION,
        provider_id=(_clean(x_llm_provider) or "").lower(),
        credential=_clean(x_llm_api_key),
        model=_clean(x_llm_model),
        endpoint=_clean(x_llm_endpoint),
    )


def get_transcription_context(
    x_transcription_provider: Optional[str] = Header(default=None),
    x_transcription_api_key: Optional[str] = Header(default=None),
    x_transcription_model: Optional[str] = Header(default=None),
    x_whisper_endpoint: Optional[str] = Header(default=None),
) -> Optional[ProviderContext]:
    """Transcription provider selection, or None when no provider header is sent."""
    provider_id = _clean(x_transcription_provider)
    if provider_id is None:
        return None
    return ProviderContext(
        family=ProviderFamily.TRANSCRIPTION,
        provider_id=provider_id.lower(),
        credential=_clean(x_transcription_api_key),
        model=_clean(x_transcription_model),
        endpoint=_clean(x_whisper_endpoint),
    )


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.record_store


def get_question_service(request: Request) -> QuestionGenerationService:
    return request.app.state.question_service


def get_resume_processor(request: Request) -> ResumeProcessor:
    return request.app.state.resume_processor


def get_job_processor(request: Request) -> TranscriptionJobProcessor:
    return request.app.state.job_processor
