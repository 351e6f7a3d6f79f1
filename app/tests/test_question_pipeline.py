import json

import pytest

from app.core.exceptions import ErrorKind, ProviderError
from app.schemas.generation import Difficulty, GenerationRequest, ProviderContext, ProviderFamily, SourceType
from app.services.pipeline.question_pipeline import QuestionGenerationService, determine_source_type
from app.services.providers import registry
from app.tests.fakes import FakeGenerationProvider, RecordingResolver

THREE_QUESTIONS = json.dumps([
    {"text": "Tell me about a time you led a team.", "suggestedCategories": ["Leadership"],
     "suggestedTraits": ["Ownership"], "difficulty": "medium", "reasoning": "Leadership"},
    {"text": "Describe a hard bug you fixed.", "suggestedCategories": ["Problem Solving", "Astrology"],
     "suggestedTraits": [], "difficulty": "hard"},
    {"text": "Walk me through a product decision.", "suggestedCategories": ["Impact"],
     "suggestedTraits": ["Customer Focus", "Data-Driven"], "difficulty": "easy"},
])


def _service(store, provider):
    resolver = RecordingResolver(provider)
    return QuestionGenerationService(store, resolver=resolver), resolver


class TestValidation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, 21, -3])
    async def test_count_out_of_range_is_rejected_before_registry(self, store, generation_context, count):
        provider = FakeGenerationProvider(THREE_QUESTIONS)
        service, resolver = _service(store, provider)

        with pytest.raises(ProviderError) as exc_info:
            await service.generate_questions(GenerationRequest(category_ids=["cat-leadership"], count=count), generation_context)

        assert exc_info.value.kind == ErrorKind.INVALID_REQUEST
        assert resolver.contexts == []
        assert provider.prompts == []

    @pytest.mark.asyncio
    async def test_request_without_targeting_is_rejected(self, store, generation_context):
        service, resolver = _service(store, FakeGenerationProvider(THREE_QUESTIONS))

        with pytest.raises(ProviderError) as exc_info:
            await service.generate_questions(GenerationRequest(job_description="   "), generation_context)

        assert exc_info.value.kind == ErrorKind.INVALID_REQUEST
        assert resolver.contexts == []

    @pytest.mark.asyncio
    async def test_validation_precedes_credential_check(self, store):
        """A bad count wins over a missing key: no registry call happens."""
        service = QuestionGenerationService(store)
        context = ProviderContext(family=ProviderFamily.GENERATION, provider_id="openai")

        with pytest.raises(ProviderError) as exc_info:
            await service.generate_questions(GenerationRequest(trait_ids=["trait-ownership"], count=25), context)
        assert exc_info.value.kind == ErrorKind.INVALID_REQUEST

    @pytest.mark.asyncio
    async def test_missing_credential_surfaces_from_registry(self, store):
        service = QuestionGenerationService(store, resolver=registry.resolve)
        context = ProviderContext(family=ProviderFamily.GENERATION, provider_id="anthropic")

        with pytest.raises(ProviderError) as exc_info:
            await service.generate_questions(GenerationRequest(category_ids=["cat-leadership"]), context)
        assert exc_info.value.kind == ErrorKind.INVALID_API_KEY
        assert exc_info.value.provider == "anthropic"


class TestGeneration:

    @pytest.mark.asyncio
    async def test_categories_only_request(self, store, generation_context):
        provider = FakeGenerationProvider(THREE_QUESTIONS, name="openai")
        service, resolver = _service(store, provider)

        result = await service.generate_questions(
            GenerationRequest(category_ids=["cat-leadership", "cat-problem-solving"], count=3),
            generation_context,
        )

        assert resolver.contexts == [generation_context]
        assert result.source_type == SourceType.GENERATED
        assert result.provider == "openai"
        assert result.generation_id
        assert [q.text for q in result.questions][0] == "Tell me about a time you led a team."
        assert [c.id for c in result.questions[0].categories] == ["cat-leadership"]
        assert [t.id for t in result.questions[0].traits] == ["trait-ownership"]
        # Unknown names are dropped, known ones kept
        assert [c.id for c in result.questions[1].categories] == ["cat-problem-solving"]
        assert result.questions[1].difficulty == Difficulty.HARD
        assert {t.id for t in result.questions[2].traits} == {"trait-customer-focus", "trait-data-driven"}

        prompt = provider.prompts[0]["prompt"]
        assert "Generate exactly 3 behavioral interview questions" in prompt
        assert "- Leadership:" in prompt
        assert "- Problem Solving:" in prompt
        assert "Respond ONLY with valid JSON" in prompt
        assert "STAR" in provider.prompts[0]["system_prompt"]
        assert provider.prompts[0]["json_mode"] is True

    @pytest.mark.asyncio
    async def test_job_description_only_request_adds_analysis(self, store, generation_context):
        provider = FakeGenerationProvider(THREE_QUESTIONS)
        service, _ = _service(store, provider)

        result = await service.generate_questions(
            GenerationRequest(job_description="Senior engineer to mentor the team and own the roadmap", company="Acme",
                              title="Staff Engineer"),
            generation_context,
        )

        assert result.source_type == SourceType.JOB
        prompt = provider.prompts[0]["prompt"]
        assert "Generate exactly 5 behavioral interview questions" in prompt
        assert "job description analysis" in prompt
        assert "Seniority Level: senior" in prompt
        assert "interviewing for Staff Engineer at Acme" in prompt
        assert "Tailor questions" in prompt

    @pytest.mark.asyncio
    async def test_mixed_request_skips_analysis(self, store, generation_context):
        provider = FakeGenerationProvider(THREE_QUESTIONS)
        service, _ = _service(store, provider)

        result = await service.generate_questions(
            GenerationRequest(category_ids=["cat-impact"], job_description="Deliver results", difficulty=Difficulty.HARD),
            generation_context,
        )

        assert result.source_type == SourceType.MIXED
        prompt = provider.prompts[0]["prompt"]
        assert "job description analysis" not in prompt
        assert "at hard difficulty level" in prompt

    @pytest.mark.asyncio
    async def test_fenced_reply_is_sanitized(self, store, generation_context):
        reply = f"Here you go:\n```json\n{THREE_QUESTIONS}\n```"
        service, _ = _service(store, FakeGenerationProvider(reply))

        result = await service.generate_questions(GenerationRequest(trait_ids=["trait-ownership"]), generation_context)
        assert len(result.questions) == 3

    @pytest.mark.asyncio
    async def test_resolution_is_order_preserving(self, store, generation_context):
        service, _ = _service(store, FakeGenerationProvider(THREE_QUESTIONS))
        result = await service.generate_questions(GenerationRequest(trait_ids=["trait-ownership"]), generation_context)
        assert [q.text for q in result.questions] == [item["text"] for item in json.loads(THREE_QUESTIONS)]

    @pytest.mark.asyncio
    async def test_each_call_gets_a_fresh_generation_id(self, store, generation_context):
        service, _ = _service(store, FakeGenerationProvider(THREE_QUESTIONS))
        request = GenerationRequest(category_ids=["cat-growth"])
        first = await service.generate_questions(request, generation_context)
        second = await service.generate_questions(request, generation_context)
        assert first.generation_id != second.generation_id


class TestFailurePolicy:

    @pytest.mark.asyncio
    async def test_provider_error_propagates_unchanged(self, store, generation_context):
        error = ProviderError(ErrorKind.RATE_LIMIT, "OpenAI rate limit exceeded", "openai")
        service, _ = _service(store, FakeGenerationProvider(error))

        with pytest.raises(ProviderError) as exc_info:
            await service.generate_questions(GenerationRequest(category_ids=["cat-leadership"]), generation_context)
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self, store, generation_context):
        service, _ = _service(store, FakeGenerationProvider(RuntimeError("socket closed"), name="gemini"))

        with pytest.raises(ProviderError) as exc_info:
            await service.generate_questions(GenerationRequest(category_ids=["cat-leadership"]), generation_context)
        assert exc_info.value.kind == ErrorKind.PROVIDER_ERROR
        assert exc_info.value.provider == "gemini"
        assert "socket closed" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_unparseable_reply(self, store, generation_context):
        service, _ = _service(store, FakeGenerationProvider("no json here", name="ollama"))

        with pytest.raises(ProviderError) as exc_info:
            await service.generate_questions(GenerationRequest(category_ids=["cat-leadership"]), generation_context)
        assert exc_info.value.message == "Invalid response format from ollama"


class TestCredentialValidation:

    @pytest.mark.asyncio
    async def test_valid_and_invalid(self, store, generation_context):
        service, _ = _service(store, FakeGenerationProvider(valid=True))
        assert await service.validate_provider_credential(generation_context) is True

        service, _ = _service(store, FakeGenerationProvider(valid=False))
        assert await service.validate_provider_credential(generation_context) is False

    @pytest.mark.asyncio
    async def test_registry_failure_is_false(self, store):
        service = QuestionGenerationService(store)
        context = ProviderContext(family=ProviderFamily.GENERATION, provider_id="does-not-exist", credential="k")
        assert await service.validate_provider_credential(context) is False


def test_source_type_rules():
    assert determine_source_type(GenerationRequest(category_ids=["c"])) == SourceType.GENERATED
    assert determine_source_type(GenerationRequest(trait_ids=["t"], job_description="jd")) == SourceType.JOB
    assert determine_source_type(GenerationRequest(category_ids=["c"], job_description="jd")) == SourceType.MIXED
