from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose wire format uses camelCase field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Provider selection ---

class ProviderFamily(str, Enum):
    GENERATION = "generation"
    TRANSCRIPTION = "transcription"


class ProviderContext(CamelModel):
    """
    Per-call provider selection. Transient: built from request headers and
    never written to the record store.
    """
    family: ProviderFamily
    provider_id: str = Field(..., description="Provider identifier within the family, e.g. 'openai' or 'ollama'.")
    credential: Optional[str] = Field(default=None, repr=False, description="Opaque API key.")
    model: Optional[str] = Field(default=None, description="Model override for this call.")
    endpoint: Optional[str] = Field(default=None, description="Base URL override for self-hosted providers.")


# --- Canonical taxonomy ---

class TaxonomyRecord(CamelModel):
    id: str
    name: str
    description: Optional[str] = None


class Category(TaxonomyRecord):
    """A canonical behavioral category, e.g. 'Leadership'."""


class Trait(TaxonomyRecord):
    """A canonical trait, e.g. 'Ownership'."""


# --- Generation ---

class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SourceType(str, Enum):
    GENERATED = "generated"
    JOB = "job"
    MIXED = "mixed"
    RESUME = "resume"


class GenerationRequest(CamelModel):
    """
    Question generation request. ``count`` range and the targeting rule are
    enforced by the orchestrator so violations surface as INVALID_REQUEST.
    """
    category_ids: List[str] = Field(default_factory=list)
    trait_ids: List[str] = Field(default_factory=list)
    job_description: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    count: Optional[int] = None
    difficulty: Optional[Difficulty] = None

    @property
    def has_job_description(self) -> bool:
        return bool(self.job_description and self.job_description.strip())


class RawGeneratedQuestion(CamelModel):
    """Question as parsed from a provider reply, before entity resolution."""
    text: str
    suggested_categories: List[str] = Field(default_factory=list)
    suggested_traits: List[str] = Field(default_factory=list)
    difficulty: Difficulty = Difficulty.MEDIUM
    reasoning: Optional[str] = None


class ResolvedGeneratedQuestion(CamelModel):
    """Question whose category/trait names were resolved to canonical records."""
    text: str
    categories: List[Category] = Field(default_factory=list)
    traits: List[Trait] = Field(default_factory=list)
    difficulty: Difficulty = Difficulty.MEDIUM
    reasoning: Optional[str] = None


class QuestionGenerationResult(CamelModel):
    questions: List[ResolvedGeneratedQuestion]
    generation_id: str
    source_type: SourceType
    provider: str


# --- Resume processing ---

class ResumeEntry(CamelModel):
    id: str
    description: str


class ResumeAnalysis(CamelModel):
    experiences: List[ResumeEntry] = Field(default_factory=list)
    projects: List[ResumeEntry] = Field(default_factory=list)


class ResumeEntityType(str, Enum):
    EXPERIENCE = "experience"
    PROJECT = "project"
