import json

import pytest

from app.core.exceptions import ErrorKind, ProviderError
from app.schemas.generation import ResumeEntityType, SourceType
from app.services.pipeline.resume_processor import ResumeProcessor
from app.tests.fakes import FakeGenerationProvider, RecordingResolver


def _processor(store, reply):
    provider = FakeGenerationProvider(reply)
    return ResumeProcessor(store, resolver=RecordingResolver(provider)), provider


@pytest.mark.asyncio
async def test_analyze_resume(store, generation_context):
    reply = json.dumps({
        "experiences": [{"id": "Acme_Backend_Engineer", "description": "- Built billing APIs"}],
        "projects": [{"id": "Chess_Engine", "description": "- Alpha-beta search"}],
    })
    processor, provider = _processor(store, reply)

    analysis = await processor.analyze_resume("Jane Doe\nAcme, Backend Engineer", generation_context)

    assert analysis.experiences[0].id == "Acme_Backend_Engineer"
    assert analysis.projects[0].description == "- Alpha-beta search"
    assert "RESUME TEXT:\nJane Doe" in provider.prompts[0]["prompt"]
    assert provider.prompts[0]["json_mode"] is True


@pytest.mark.asyncio
async def test_analyze_resume_requires_text(store, generation_context):
    processor, provider = _processor(store, "{}")
    with pytest.raises(ProviderError) as exc_info:
        await processor.analyze_resume("  ", generation_context)
    assert exc_info.value.kind == ErrorKind.INVALID_REQUEST
    assert provider.prompts == []


@pytest.mark.asyncio
async def test_consolidate_description_returns_stripped_text(store, generation_context):
    processor, provider = _processor(store, "\n- Led billing rewrite\n- Cut latency 40%\n")

    merged = await processor.consolidate_description("- Led billing", "- Cut latency", generation_context)

    assert merged == "- Led billing rewrite\n- Cut latency 40%"
    assert provider.prompts[0]["json_mode"] is False


@pytest.mark.asyncio
async def test_generate_resume_questions(store, generation_context):
    reply = json.dumps({"questions": [
        {"text": "Tell me about the billing rewrite.", "suggestedCategories": ["Impact"], "suggestedTraits": ["Ownership"]},
    ]})
    processor, provider = _processor(store, reply)

    result = await processor.generate_resume_questions(
        ResumeEntityType.EXPERIENCE, "Acme_Backend_Engineer", "- Built billing APIs", 1, generation_context
    )

    assert result.source_type == SourceType.RESUME
    assert [c.id for c in result.questions[0].categories] == ["cat-impact"]
    prompt = provider.prompts[0]["prompt"]
    assert "for this work experience" in prompt
    assert "ID: Acme_Backend_Engineer" in prompt
    assert "Ownership" in prompt


@pytest.mark.asyncio
async def test_generate_resume_questions_count_range(store, generation_context):
    processor, provider = _processor(store, "[]")
    with pytest.raises(ProviderError) as exc_info:
        await processor.generate_resume_questions(ResumeEntityType.PROJECT, "Chess", "- search", 50, generation_context)
    assert exc_info.value.kind == ErrorKind.INVALID_REQUEST
    assert provider.prompts == []
