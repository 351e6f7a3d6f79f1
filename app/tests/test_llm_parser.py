import json

import pytest

from app.core.exceptions import ErrorKind, ProviderError
from app.schemas.generation import Difficulty
from app.services.pipeline.llm_parser import clean_llm_json_output, parse_generated_questions, parse_resume_analysis

ITEM = {
    "text": "Describe a time you disagreed with a teammate.",
    "suggestedCategories": ["Teamwork"],
    "suggestedTraits": ["Empathy"],
    "difficulty": "hard",
    "reasoning": "Conflict handling",
}


class TestCleanOutput:

    def test_strips_markdown_fences(self):
        raw = f"```json\n{json.dumps([ITEM])}\n```"
        assert json.loads(clean_llm_json_output(raw)) == [ITEM]

    def test_extracts_array_from_surrounding_prose(self):
        raw = f"Sure! Here are your questions:\n{json.dumps([ITEM])}\nGood luck."
        assert json.loads(clean_llm_json_output(raw)) == [ITEM]

    def test_tolerates_trailing_commas(self):
        raw = '[{"text": "Q1", "suggestedCategories": ["Impact",],},]'
        assert json.loads(clean_llm_json_output(raw)) == [{"text": "Q1", "suggestedCategories": ["Impact"]}]

    def test_empty_input(self):
        assert clean_llm_json_output("") == ""


class TestParseGeneratedQuestions:

    def test_plain_array(self):
        questions = parse_generated_questions(json.dumps([ITEM]), "openai")
        assert len(questions) == 1
        assert questions[0].difficulty == Difficulty.HARD
        assert questions[0].suggested_categories == ["Teamwork"]

    def test_questions_wrapper_object_is_unwrapped(self):
        questions = parse_generated_questions(json.dumps({"questions": [ITEM, ITEM]}), "openai")
        assert len(questions) == 2

    @pytest.mark.parametrize("key", ["interview_questions", "items", "result"])
    def test_lone_list_under_any_key_is_unwrapped(self, key):
        reply = json.dumps({key: [ITEM, {"question": "Q2"}, "Q3"]})
        questions = parse_generated_questions(reply, "openai")
        assert [q.text for q in questions] == [ITEM["text"], "Q2", "Q3"]

    def test_object_with_several_lists_is_not_guessed(self):
        reply = json.dumps({"first": [ITEM], "second": [ITEM]})
        assert parse_generated_questions(reply, "openai") == []

    def test_single_object_is_wrapped(self):
        questions = parse_generated_questions(json.dumps(ITEM), "gemini")
        assert [q.text for q in questions] == [ITEM["text"]]

    def test_alternate_field_names_and_bare_strings(self):
        raw = json.dumps([{"question": "Q?", "categories": "Leadership", "traits": ["Ownership"], "difficulty": "brutal"}])
        question = parse_generated_questions(raw, "ollama")[0]
        assert question.text == "Q?"
        assert question.suggested_categories == ["Leadership"]
        assert question.suggested_traits == ["Ownership"]
        assert question.difficulty == Difficulty.MEDIUM

    def test_items_without_text_are_dropped(self):
        raw = json.dumps([ITEM, {"suggestedCategories": ["Impact"]}, {"text": "   "}])
        assert len(parse_generated_questions(raw, "anthropic")) == 1

    def test_unparseable_reply_raises_provider_error(self):
        with pytest.raises(ProviderError) as exc_info:
            parse_generated_questions("I'm sorry, I can't help with that.", "anthropic")
        assert exc_info.value.kind == ErrorKind.PROVIDER_ERROR
        assert exc_info.value.provider == "anthropic"
        assert exc_info.value.message == "Invalid response format from anthropic"


class TestParseResumeAnalysis:

    def test_keeps_complete_entries_only(self):
        raw = json.dumps({
            "experiences": [{"id": "Acme_Engineer", "description": "- Built things"}, {"id": "", "description": "x"}],
            "projects": [{"id": "Chess_Bot", "description": "- Minimax"}],
        })
        analysis = parse_resume_analysis(raw, "openai")
        assert [e.id for e in analysis.experiences] == ["Acme_Engineer"]
        assert [p.id for p in analysis.projects] == ["Chess_Bot"]

    def test_array_reply_is_rejected(self):
        with pytest.raises(ProviderError):
            parse_resume_analysis("[]", "openai")
