import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import (
    get_generation_context,
    get_question_service,
    get_resume_processor,
    get_transcription_context,
)
from app.schemas.api import (
    ConsolidateRequest,
    ConsolidateResponse,
    CredentialValidationResponse,
    ResumeAnalyzeRequest,
    ResumeQuestionsRequest,
)
from app.schemas.generation import (
    GenerationRequest,
    ProviderContext,
    ProviderFamily,
    QuestionGenerationResult,
    ResumeAnalysis,
)
from app.services.pipeline.question_pipeline import QuestionGenerationService
from app.services.pipeline.resume_processor import ResumeProcessor

logger = logging.getLogger(__name__)

questions_router = APIRouter()


@questions_router.post("/questions/generate", response_model=QuestionGenerationResult)
async def generate_questions(
    request: GenerationRequest,
    context: ProviderContext = Depends(get_generation_context),
    service: QuestionGenerationService = Depends(get_question_service),
):
    """Generate behavioral questions with the provider selected by the X-LLM-* headers."""
    return await service.generate_questions(request, context)


@questions_router.get("/providers/validate", response_model=CredentialValidationResponse)
async def validate_provider(
    family: ProviderFamily = Query(default=ProviderFamily.GENERATION),
    generation_context: ProviderContext = Depends(get_generation_context),
    transcription_context: Optional[ProviderContext] = Depends(get_transcription_context),
    service: QuestionGenerationService = Depends(get_question_service),
):
    context = generation_context if family == ProviderFamily.GENERATION else transcription_context
    if context is None:
        return CredentialValidationResponse(valid=False, family=family)

    valid = await service.validate_provider_credential(context)
    logger.info(f"Credential check for {family.value}/{context.provider_id}: {'valid' if valid else 'invalid'}")
    return CredentialValidationResponse(valid=valid, family=family, provider=context.provider_id or None)


@questions_router.post("/resume/analyze", response_model=ResumeAnalysis)
async def analyze_resume(
    body: ResumeAnalyzeRequest,
    context: ProviderContext = Depends(get_generation_context),
    processor: ResumeProcessor = Depends(get_resume_processor),
):
    return await processor.analyze_resume(body.resume_text, context)


@questions_router.post("/resume/consolidate", response_model=ConsolidateResponse)
async def consolidate_description(
    body: ConsolidateRequest,
    context: ProviderContext = Depends(get_generation_context),
    processor: ResumeProcessor = Depends(get_resume_processor),
):
    description = await processor.consolidate_description(body.old_description, body.new_description, context)
    return ConsolidateResponse(description=description)


@questions_router.post("/resume/questions", response_model=QuestionGenerationResult)
async def generate_resume_questions(
    body: ResumeQuestionsRequest,
    context: ProviderContext = Depends(get_generation_context),
    processor: ResumeProcessor = Depends(get_resume_processor),
):
    return await processor.generate_resume_questions(
        body.entity_type, body.entity_id, body.description, body.count, context
    )
