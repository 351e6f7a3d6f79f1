import pytest

from app.schemas.generation import Category, RawGeneratedQuestion, Trait
from app.services.pipeline.entity_resolver import canonical_order, resolve_name, resolve_names, resolve_question

CATEGORIES = canonical_order([
    Category(id="c2", name="Crisis Communication"),
    Category(id="c1", name="Communication"),
    Category(id="c3", name="Leadership"),
    Category(id="c4", name="Problem Solving"),
])

TRAITS = canonical_order([
    Trait(id="t1", name="Ownership"),
    Trait(id="t2", name="Data-Driven"),
])


class TestResolveNames:

    def test_exact_match_is_case_insensitive(self):
        assert [c.id for c in resolve_names(["leadership", "PROBLEM SOLVING"], CATEGORIES)] == ["c3", "c4"]

    def test_exact_match_wins_over_substring(self):
        """'Communication' must not also pick up 'Crisis Communication'."""
        resolved = resolve_names(["Communication"], CATEGORIES)
        assert [c.name for c in resolved] == ["Communication"]

    def test_substring_match_in_either_direction(self):
        assert [c.id for c in resolve_names(["Lead"], CATEGORIES)] == ["c3"]
        assert [c.id for c in resolve_names(["Strong Leadership Skills"], CATEGORIES)] == ["c3"]

    def test_substring_tie_break_uses_canonical_order(self):
        # Both communication records contain "communicat"; c1 sorts first
        assert [c.id for c in resolve_names(["communicat"], CATEGORIES)] == ["c1"]

    def test_unknown_and_blank_names_are_dropped(self):
        assert resolve_names(["Astrophysics", "", "   "], CATEGORIES) == []

    def test_result_is_subset_of_canonical_and_not_longer_than_input(self):
        names = ["Leadership", "Leader", "unknown", "Problem Solving"]
        resolved = resolve_names(names, CATEGORIES)
        assert len(resolved) <= len(names)
        assert all(record in CATEGORIES for record in resolved)

    def test_duplicate_matches_collapse(self):
        assert [c.id for c in resolve_names(["Leadership", "leadership"], CATEGORIES)] == ["c3"]

    def test_empty_canonical_set(self):
        assert resolve_name("Leadership", []) is None


class TestResolveQuestion:

    @pytest.mark.asyncio
    async def test_resolves_categories_and_traits_and_keeps_fields(self):
        question = RawGeneratedQuestion(
            text="Tell me about a time you led a migration.",
            suggested_categories=["Leadership", "Astrology"],
            suggested_traits=["ownership", "Data Driven", "Data-Driven"],
            reasoning="Checks ownership",
        )

        resolved = await resolve_question(question, CATEGORIES, TRAITS)

        assert resolved.text == question.text
        assert [c.id for c in resolved.categories] == ["c3"]
        assert [t.id for t in resolved.traits] == ["t1", "t2"]
        assert resolved.difficulty == question.difficulty
        assert resolved.reasoning == "Checks ownership"
