"""
Entity resolution: reconcile free-text category/trait names returned by a
model with canonical taxonomy records.

Resolution is lossy on purpose. A name that matches nothing is dropped and
never fails the request.
"""
import logging
from typing import Iterable, List, Optional, Sequence, TypeVar

from app.schemas.generation import Category, RawGeneratedQuestion, ResolvedGeneratedQuestion, TaxonomyRecord, Trait

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=TaxonomyRecord)


def canonical_order(records: Iterable[RecordT]) -> List[RecordT]:
    """Order canonical records by id so substring tie-breaks are reproducible."""
    return sorted(records, key=lambda record: record.id)


def resolve_name(name: str, canonical: Sequence[RecordT]) -> Optional[RecordT]:
    """
    Resolve a single name. Exact case-insensitive match wins; otherwise the
    first record (in canonical order) whose name contains, or is contained
    in, the given name.
    """
    needle = name.strip().lower()
    if not needle:
        return None

    for record in canonical:
        if record.name.lower() == needle:
            return record

    for record in canonical:
        candidate = record.name.lower()
        if needle in candidate or candidate in needle:
            return record

    return None


def resolve_names(names: Iterable[str], canonical: Sequence[RecordT]) -> List[RecordT]:
    """
    Resolve each name independently against the canonical set.

    Args:
        names: Free-text names from the model.
        canonical: Canonical records, already in a deterministic order.

    Returns:
        Matched records in input order. Unmatched names are dropped and a record
        is never returned twice.
    """
    resolved: List[RecordT] = []
    seen = set()
    for name in names:
        record = resolve_name(name, canonical)
        if record is None:
            logger.debug(f"No canonical match for '{name}'")
            continue
        if record.id not in seen:
            seen.add(record.id)
            resolved.append(record)
    return resolved


async def resolve_question(
    question: RawGeneratedQuestion,
    categories: Sequence[Category],
    traits: Sequence[Trait],
) -> ResolvedGeneratedQuestion:
    """Resolve one generated question's category and trait names."""
    return ResolvedGeneratedQuestion(
        text=question.text,
        categories=resolve_names(question.suggested_categories, categories),
        traits=resolve_names(question.suggested_traits, traits),
        difficulty=question.difficulty,
        reasoning=question.reasoning,
    )
