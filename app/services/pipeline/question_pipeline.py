import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable, List, Sequence, Tuple, TypeVar

from app.core.config import settings
from app.core.exceptions import ErrorKind, ProviderError
from app.core.logger import log_async_execution_time
from app.schemas.generation import (
    Category,
    GenerationRequest,
    ProviderContext,
    ProviderFamily,
    QuestionGenerationResult,
    RawGeneratedQuestion,
    ResolvedGeneratedQuestion,
    SourceType,
    Trait,
)
from app.services.pipeline.entity_resolver import canonical_order, resolve_question
from app.services.providers.base import GenerationProvider
from app.services.providers.registry import resolve
from app.services.repository import RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
ProviderResolver = Callable[[ProviderContext], Any]


def validate_count(count: Any, provider: str = "unknown") -> int:
    """Apply the default count and enforce the allowed range."""
    if count is None:
        return settings.DEFAULT_QUESTION_COUNT
    if not isinstance(count, int) or isinstance(count, bool) or not (
        settings.MIN_QUESTION_COUNT <= count <= settings.MAX_QUESTION_COUNT
    ):
        raise ProviderError(
            ErrorKind.INVALID_REQUEST,
            f"Count must be between {settings.MIN_QUESTION_COUNT} and {settings.MAX_QUESTION_COUNT}",
            provider,
        )
    return count


def validate_request(request: GenerationRequest, provider: str = "unknown") -> int:
    """
    Check a generation request before any provider work.

    Returns:
        The effective question count.

    Raises:
        ProviderError: INVALID_REQUEST for an out-of-range count or a request
            with no categories, no traits and no job description.
    """
    count = validate_count(request.count, provider)
    if not request.category_ids and not request.trait_ids and not request.has_job_description:
        raise ProviderError(
            ErrorKind.INVALID_REQUEST,
            "At least one category, trait, or job description is required",
            provider,
        )
    return count


def determine_source_type(request: GenerationRequest) -> SourceType:
    if request.has_job_description and not request.category_ids:
        return SourceType.JOB
    if request.has_job_description:
        return SourceType.MIXED
    return SourceType.GENERATED


def resolve_generation_provider(resolver: ProviderResolver, context: ProviderContext) -> GenerationProvider:
    if context.family != ProviderFamily.GENERATION:
        raise ProviderError(
            ErrorKind.INVALID_REQUEST,
            f"Expected a generation provider context, got {context.family.value}",
            context.provider_id or "unknown",
        )
    return resolver(context)


async def load_canonical_taxonomy(store: RecordStore) -> Tuple[List[Category], List[Trait]]:
    categories, traits = await asyncio.gather(store.get_categories(), store.get_traits())
    return canonical_order(categories), canonical_order(traits)


async def run_provider_call(provider_name: str, call: Awaitable[T]) -> T:
    """Await a provider call; non-taxonomy failures become PROVIDER_ERROR."""
    try:
        return await call
    except ProviderError:
        raise
    except Exception as e:
        logger.error(f"Unexpected failure from {provider_name}: {e}", exc_info=True)
        raise ProviderError(ErrorKind.PROVIDER_ERROR, str(e) or f"{provider_name} call failed", provider_name) from e


async def resolve_all(
    questions: Sequence[RawGeneratedQuestion],
    categories: Sequence[Category],
    traits: Sequence[Trait],
) -> List[ResolvedGeneratedQuestion]:
    """Resolve every question concurrently; output order matches input order."""
    return list(await asyncio.gather(*(resolve_question(q, categories, traits) for q in questions)))


class QuestionGenerationService:
    """
    Orchestrates one question-generation request: validation, provider
    resolution, taxonomy loading, the provider call and entity resolution.
    """

    def __init__(self, store: RecordStore, resolver: ProviderResolver = resolve):
        self.store = store
        self.resolver = resolver

    @log_async_execution_time
    async def generate_questions(
        self,
        request: GenerationRequest,
        context: ProviderContext,
    ) -> QuestionGenerationResult:
        """
        Generate behavioral questions with the provider named by ``context``.

        Args:
            request: Targeting (categories, traits, job description), count and difficulty.
            context: Per-call provider selection and credential.

        Returns:
            QuestionGenerationResult with resolved questions, a fresh generation id,
            the source type and the provider id.

        Raises:
            ProviderError: Validation failures (INVALID_REQUEST), registry failures,
                and any provider failure mapped onto the shared taxonomy.
        """
        validate_request(request, context.provider_id or "unknown")
        provider = resolve_generation_provider(self.resolver, context)

        categories, traits = await load_canonical_taxonomy(self.store)
        category_ids, trait_ids = set(request.category_ids), set(request.trait_ids)
        selected_categories = [c for c in categories if c.id in category_ids]
        selected_traits = [t for t in traits if t.id in trait_ids]
        unknown_ids = (category_ids - {c.id for c in selected_categories}) | (
            trait_ids - {t.id for t in selected_traits}
        )
        if unknown_ids:
            logger.warning(f"Ignoring unknown taxonomy ids: {sorted(unknown_ids)}")

        logger.info(
            f"Generating questions with {provider.name}: "
            f"{len(selected_categories)} categories, {len(selected_traits)} traits, "
            f"job description={'yes' if request.has_job_description else 'no'}"
        )
        raw_questions = await run_provider_call(
            provider.name,
            provider.generate_questions(request, selected_categories, selected_traits),
        )

        resolved = await resolve_all(raw_questions, categories, traits)
        logger.info(f"{provider.name} returned {len(resolved)} question(s)")

        return QuestionGenerationResult(
            questions=resolved,
            generation_id=str(uuid.uuid4()),
            source_type=determine_source_type(request),
            provider=provider.name,
        )

    async def validate_provider_credential(self, context: ProviderContext) -> bool:
        """True when the context resolves and the vendor accepts the credential."""
        try:
            provider = self.resolver(context)
            return await provider.validate_api_key()
        except Exception as e:
            logger.info(f"Credential validation failed for {context.family.value}/{context.provider_id}: {e}")
            return False
