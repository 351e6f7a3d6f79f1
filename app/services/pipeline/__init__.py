"""
Question Generation Pipeline Package

Architecture:
- question_pipeline.py: Orchestration (validation, prompts, provider call, resolution)
- resume_processor.py: Resume analysis and resume-driven questions
- job_analyzer.py: Rule-based job description pre-analysis
- llm_parser.py: Response sanitization and parsing
- entity_resolver.py: Name -> canonical taxonomy record resolution

Only the leaf modules are re-exported here; the orchestrators import the
provider registry and are imported from their own modules.
"""

from .entity_resolver import canonical_order, resolve_names, resolve_question
from .job_analyzer import JobAnalysis, analyze_job_description
from .llm_parser import clean_llm_json_output, parse_generated_questions

__all__ = [
    'canonical_order',
    'resolve_names',
    'resolve_question',
    'JobAnalysis',
    'analyze_job_description',
    'clean_llm_json_output',
    'parse_generated_questions',
]
