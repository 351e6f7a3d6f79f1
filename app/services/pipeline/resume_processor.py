import logging
import uuid

from app.core.exceptions import ErrorKind, ProviderError
from app.core.logger import log_async_execution_time
from app.core.prompts import (
    JSON_RESPONSE_INSTRUCTION,
    QUESTIONS_OBJECT_INSTRUCTION,
    generate_consolidation_prompt,
    generate_resume_analysis_prompt,
    generate_resume_questions_prompt,
    generate_system_prompt,
)
from app.schemas.generation import (
    ProviderContext,
    QuestionGenerationResult,
    ResumeAnalysis,
    ResumeEntityType,
    SourceType,
)
from app.services.pipeline.llm_parser import parse_generated_questions, parse_resume_analysis
from app.services.pipeline.question_pipeline import (
    ProviderResolver,
    load_canonical_taxonomy,
    resolve_all,
    resolve_generation_provider,
    run_provider_call,
    validate_count,
)
from app.services.providers.registry import resolve
from app.services.repository import RecordStore

logger = logging.getLogger(__name__)


def _require_text(value: str, field: str, provider: str) -> str:
    if not value or not value.strip():
        raise ProviderError(ErrorKind.INVALID_REQUEST, f"{field} is required", provider)
    return value.strip()


class ResumeProcessor:
    """Resume extraction, description merging and resume-driven questions."""

    def __init__(self, store: RecordStore, resolver: ProviderResolver = resolve):
        self.store = store
        self.resolver = resolver

    @log_async_execution_time
    async def analyze_resume(self, resume_text: str, context: ProviderContext) -> ResumeAnalysis:
        text = _require_text(resume_text, "Resume text", context.provider_id or "unknown")
        provider = resolve_generation_provider(self.resolver, context)

        reply = await run_provider_call(
            provider.name,
            provider.generate_completion(generate_resume_analysis_prompt(text), json_mode=True),
        )
        analysis = parse_resume_analysis(reply, provider.name)
        logger.info(
            f"Resume analysis via {provider.name}: "
            f"{len(analysis.experiences)} experience(s), {len(analysis.projects)} project(s)"
        )
        return analysis

    async def consolidate_description(
        self,
        old_description: str,
        new_description: str,
        context: ProviderContext,
    ) -> str:
        """Merge two descriptions of the same experience into one bullet list."""
        provider_id = context.provider_id or "unknown"
        old_text = _require_text(old_description, "Old description", provider_id)
        new_text = _require_text(new_description, "New description", provider_id)
        provider = resolve_generation_provider(self.resolver, context)

        reply = await run_provider_call(
            provider.name,
            provider.generate_completion(generate_consolidation_prompt(old_text, new_text)),
        )
        return reply.strip()

    @log_async_execution_time
    async def generate_resume_questions(
        self,
        entity_type: ResumeEntityType,
        entity_id: str,
        description: str,
        count: int,
        context: ProviderContext,
    ) -> QuestionGenerationResult:
        """
        Generate questions about one resume experience or project.

        Args:
            entity_type: experience or project.
            entity_id: Identifier of the resume entry, e.g. ``Acme_Backend_Engineer``.
            description: The entry's description.
            count: Number of questions, same range as regular generation.
            context: Per-call generation provider selection.

        Returns:
            QuestionGenerationResult with ``source_type`` resume.
        """
        provider_id = context.provider_id or "unknown"
        effective_count = validate_count(count, provider_id)
        text = _require_text(description, "Description", provider_id)
        provider = resolve_generation_provider(self.resolver, context)

        categories, traits = await load_canonical_taxonomy(self.store)
        prompt = generate_resume_questions_prompt(entity_type, entity_id, text, effective_count, categories, traits)

        reply = await run_provider_call(
            provider.name,
            provider.generate_completion(
                f"{prompt}\n\n{JSON_RESPONSE_INSTRUCTION} {QUESTIONS_OBJECT_INSTRUCTION}",
                system_prompt=generate_system_prompt(),
                json_mode=True,
            ),
        )
        raw_questions = parse_generated_questions(reply, provider.name)
        resolved = await resolve_all(raw_questions, categories, traits)

        return QuestionGenerationResult(
            questions=resolved,
            generation_id=str(uuid.uuid4()),
            source_type=SourceType.RESUME,
            provider=provider.name,
        )
