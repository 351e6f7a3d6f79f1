import json
import logging
import re
from typing import Any, List, Optional

from app.core.exceptions import ErrorKind, ProviderError
from app.schemas.generation import Difficulty, RawGeneratedQuestion, ResumeAnalysis

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r'```(?:json|JSON)?\s*')
_TRAILING_COMMA_RE = re.compile(r',\s*([\]}])')


def clean_llm_json_output(raw_text: str) -> str:
    """Strip markdown fences and surrounding prose from an LLM reply, leaving the JSON text."""
    if not raw_text:
        return ""

    text = _FENCE_RE.sub('', raw_text).replace('```', '').strip()

    try:
        json.loads(text)
        return text
    except json.JSONDecodeError:
        pass

    # Fallback: take the outermost array or object, whichever starts first
    candidates = []
    for open_char, close_char in (('[', ']'), ('{', '}')):
        start_idx = text.find(open_char)
        end_idx = text.rfind(close_char)
        if start_idx != -1 and end_idx > start_idx:
            candidates.append((start_idx, text[start_idx:end_idx + 1]))

    for _, extracted in sorted(candidates):
        for attempt in (extracted, _TRAILING_COMMA_RE.sub(r'\1', extracted)):
            try:
                json.loads(attempt)
                return attempt
            except json.JSONDecodeError:
                continue

    return _TRAILING_COMMA_RE.sub(r'\1', text)


def load_llm_json(raw_text: str, provider: str) -> Any:
    """
    Parse an LLM reply as JSON after sanitization.

    Raises:
        ProviderError: PROVIDER_ERROR if no JSON can be recovered.
    """
    cleaned = clean_llm_json_output(raw_text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Unparseable reply from {provider}: {e}")
        logger.debug(f"Raw output (first 500 chars): {str(raw_text)[:500]}...")
        raise ProviderError(ErrorKind.PROVIDER_ERROR, f"Invalid response format from {provider}", provider) from e


def _as_name_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def _as_difficulty(value: Any) -> Difficulty:
    try:
        return Difficulty(str(value).strip().lower())
    except ValueError:
        return Difficulty.MEDIUM


def normalize_question(item: Any) -> Optional[RawGeneratedQuestion]:
    """Normalize one parsed item; returns None when it carries no question text."""
    if isinstance(item, str):
        item = {"text": item}
    if not isinstance(item, dict):
        return None

    text = item.get("text") or item.get("question")
    if not isinstance(text, str) or not text.strip():
        return None

    reasoning = item.get("reasoning")
    return RawGeneratedQuestion(
        text=text.strip(),
        suggested_categories=_as_name_list(item.get("suggestedCategories", item.get("categories"))),
        suggested_traits=_as_name_list(item.get("suggestedTraits", item.get("traits"))),
        difficulty=_as_difficulty(item.get("difficulty")),
        reasoning=reasoning.strip() if isinstance(reasoning, str) and reasoning.strip() else None,
    )


def _unwrap_question_object(data: dict) -> list:
    """
    Find the question list inside a JSON-object reply.

    JSON-object modes force a wrapper whose key the model picks, so besides
    ``questions`` a lone list-valued key is unwrapped too. An object that is
    itself a question comes back as a one-item list.
    """
    if isinstance(data.get("questions"), list):
        return data["questions"]
    if "text" in data or "question" in data:
        return [data]

    lists = [value for value in data.values() if isinstance(value, list)]
    if len(lists) == 1:
        return lists[0]
    return [data]


def parse_generated_questions(raw_text: str, provider: str) -> List[RawGeneratedQuestion]:
    """
    Parse a provider's question-generation reply into RawGeneratedQuestion items.

    Accepts a JSON array, an object wrapping the array under ``questions`` or
    under its only list-valued key, or a single question object. Items without
    question text are dropped.

    Args:
        raw_text: The provider's raw reply.
        provider: Provider id, used for error attribution.

    Returns:
        The normalized questions in reply order.
    """
    data = load_llm_json(raw_text, provider)

    if isinstance(data, dict):
        data = _unwrap_question_object(data)
    if not isinstance(data, list):
        raise ProviderError(ErrorKind.PROVIDER_ERROR, f"Invalid response format from {provider}", provider)

    questions = [q for q in (normalize_question(item) for item in data) if q is not None]
    dropped = len(data) - len(questions)
    if dropped:
        logger.warning(f"Dropped {dropped} item(s) without question text from {provider} reply")
    return questions


def parse_resume_analysis(raw_text: str, provider: str) -> ResumeAnalysis:
    """Parse the resume extraction reply; entries missing an id or description are skipped."""
    data = load_llm_json(raw_text, provider)
    if not isinstance(data, dict):
        raise ProviderError(ErrorKind.PROVIDER_ERROR, f"Invalid response format from {provider}", provider)

    def _entries(key: str) -> list:
        entries = []
        for entry in data.get(key) or []:
            if isinstance(entry, dict) and entry.get("id") and entry.get("description"):
                entries.append({"id": str(entry["id"]).strip(), "description": str(entry["description"]).strip()})
        return entries

    return ResumeAnalysis(experiences=_entries("experiences"), projects=_entries("projects"))
