"""Rule-based job description pre-analysis.

Runs before the provider call when a job description is given without explicit
categories, so the prompt carries focus areas and a seniority level even when
the user picked nothing from the taxonomy.
"""
import re
from dataclasses import dataclass, field
from typing import List, Tuple

CATEGORY_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ('Leadership', ('lead', 'mentor', 'manage')),
    ('Teamwork', ('collaborat', 'cross-functional', 'team')),
    ('Problem Solving', ('problem', 'debug', 'troubleshoot')),
    ('Communication', ('communicat', 'present', 'stakeholder')),
    ('Innovation', ('innovat', 'improv', 'new')),
    ('Impact', ('impact', 'result', 'deliver')),
]

TRAIT_KEYWORDS: List[Tuple[Tuple[str, ...], Tuple[str, ...]]] = [
    (('Ownership',), ('ownership', 'responsible')),
    (('Data-Driven', 'Analytical Thinking'), ('data', 'metric', 'analyz')),
    (('Customer Focus',), ('customer', 'user', 'client')),
    (('Strategic Thinking',), ('strateg', 'vision', 'roadmap')),
    (('Execution', 'Results-Oriented'), ('execute', 'deliver', 'ship')),
]

SKILL_PATTERNS = [
    re.compile(r'experience with ([\w\s,]+)', re.IGNORECASE),
    re.compile(r'proficient in ([\w\s,]+)', re.IGNORECASE),
    re.compile(r'knowledge of ([\w\s,]+)', re.IGNORECASE),
    re.compile(r'familiar with ([\w\s,]+)', re.IGNORECASE),
]


@dataclass
class JobAnalysis:
    suggested_categories: List[str] = field(default_factory=list)
    suggested_traits: List[str] = field(default_factory=list)
    key_skills: List[str] = field(default_factory=list)
    seniority_level: str = "mid"


def _unique(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def classify_seniority(text: str) -> str:
    """Return one of junior, mid, senior, staff or principal."""
    lowered = text.lower()
    if 'principal' in lowered:
        return 'principal'
    if 'staff' in lowered:
        return 'staff'
    if 'senior' in lowered or 'lead' in lowered:
        return 'senior'
    if 'junior' in lowered or 'entry' in lowered or 'early career' in lowered:
        return 'junior'
    return 'mid'


def extract_key_skills(text: str) -> List[str]:
    skills: List[str] = []
    for pattern in SKILL_PATTERNS:
        for match in pattern.finditer(text):
            skills.extend(part.strip() for part in match.group(1).split(','))
    return _unique([skill for skill in skills if skill])


def analyze_job_description(job_description: str) -> JobAnalysis:
    """
    Map a job description onto category/trait suggestions, key skills and a
    seniority level using keyword buckets.

    Args:
        job_description: Free-text job posting.

    Returns:
        JobAnalysis with de-duplicated suggestions in bucket order.
    """
    lowered = job_description.lower()

    categories = [name for name, keywords in CATEGORY_KEYWORDS if any(k in lowered for k in keywords)]

    traits: List[str] = []
    for names, keywords in TRAIT_KEYWORDS:
        if any(k in lowered for k in keywords):
            traits.extend(names)

    return JobAnalysis(
        suggested_categories=_unique(categories),
        suggested_traits=_unique(traits),
        key_skills=extract_key_skills(job_description),
        seniority_level=classify_seniority(job_description),
    )
