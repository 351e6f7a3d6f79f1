from typing import Dict, List, Optional, Sequence

from app.schemas.generation import Category, GenerationRequest, ResumeEntityType, Trait
from app.services.pipeline.job_analyzer import JobAnalysis

# Appended by every generation adapter, since not all vendors enforce structured output
JSON_RESPONSE_INSTRUCTION = (
    "Respond ONLY with valid JSON. Do not include markdown, code fences, or any text outside the JSON."
)

# JSON-object modes (OpenAI json_object) cannot return a bare array
QUESTIONS_OBJECT_INSTRUCTION = (
    'If you must return a JSON object instead of an array, put the question array under the key '
    '"questions", like {"questions": [...]}.'
)

CATEGORY_PROMPT_DETAILS: Dict[str, str] = {
    'Leadership': 'Focus on guiding teams, making decisions, influencing without authority, taking ownership of outcomes, and driving initiatives forward',
    'Teamwork': 'Explore collaboration across functions, conflict resolution, supporting teammates, building consensus, and working in diverse teams',
    'Problem Solving': 'Examine analytical thinking, debugging complex issues, finding creative solutions, working with constraints, and systematic approaches',
    'Communication': 'Assess ability to explain complex topics simply, deliver difficult messages, present to various audiences, and adapt communication style',
    'Innovation': 'Look for challenging status quo, implementing new ideas, improving processes, creative problem-solving, and driving change',
    'Adversity': 'Explore handling failure, receiving criticism, managing setbacks, learning from mistakes, and maintaining resilience',
    'Impact': 'Focus on delivering measurable results, creating business value, exceeding expectations, and driving meaningful outcomes',
    'Growth': 'Examine continuous learning, seeking feedback, mentoring others, expanding comfort zone, and skill development',
}

TRAIT_PROMPT_DETAILS: Dict[str, str] = {
    'Initiative': 'Taking action without being asked, identifying opportunities, going above and beyond',
    'Collaboration': 'Working effectively with others, building relationships, fostering team success',
    'Adaptability': 'Adjusting to change, handling ambiguity, being flexible in approach',
    'Resilience': 'Bouncing back from setbacks, maintaining positivity, persevering through challenges',
    'Empathy': "Understanding others' perspectives, showing emotional intelligence, building trust",
    'Analytical Thinking': 'Breaking down complex problems, using data effectively, logical reasoning',
    'Customer Focus': 'Prioritizing user needs, understanding customer pain points, delivering value',
    'Ownership': 'Taking responsibility, seeing things through, accountability for outcomes',
    'Influence': 'Persuading others, building buy-in, inspiring action without authority',
    'Strategic Thinking': 'Seeing big picture, long-term planning, connecting dots across areas',
    'Execution': 'Getting things done, delivering on time, turning plans into results',
    'Creativity': 'Finding novel solutions, thinking outside the box, innovative approaches',
    'Data-Driven': 'Using metrics to guide decisions, measuring impact, evidence-based thinking',
    'Humility': 'Being open to feedback, admitting mistakes, continuous learning mindset',
    'Integrity': 'Doing the right thing, ethical decision-making, building trust through honesty',
    'Results-Oriented': 'Focusing on outcomes, driving to completion, measuring success',
}

QUESTION_ITEM_SCHEMA = (
    "{\n"
    "  \"text\": \"The complete question text\",\n"
    "  \"suggestedCategories\": [\"Category names that this question assesses\"],\n"
    "  \"suggestedTraits\": [\"Trait names that this question evaluates\"],\n"
    "  \"difficulty\": \"easy|medium|hard\",\n"
    "  \"reasoning\": \"Brief explanation of why this is an effective behavioral question\"\n"
    "}"
)

QUESTION_EXAMPLE = (
    "[\n"
    "  {\n"
    "    \"text\": \"Tell me about a time when you led a team through a challenging project\",\n"
    "    \"suggestedCategories\": [\"Leadership\", \"Teamwork\"],\n"
    "    \"suggestedTraits\": [\"Initiative\", \"Collaboration\"],\n"
    "    \"difficulty\": \"medium\",\n"
    "    \"reasoning\": \"This question effectively assesses leadership skills and team collaboration\"\n"
    "  }\n"
    "]"
)


def generate_system_prompt() -> str:
    """
    System prompt shared by every generation provider.

    Returns:
        The STAR interview-coach role and question guidelines.
    """
    return (
        "You are an expert behavioral interview coach specializing in the STAR method "
        "(Situation, Task, Action, Result). You help candidates prepare for interviews at top technology companies.\n\n"
        "Your expertise includes:\n"
        "- Creating questions that reveal specific competencies and behaviors\n"
        "- Ensuring questions are open-ended and based on past experiences\n"
        "- Varying difficulty levels appropriately\n"
        "- Focusing on real situations, not hypotheticals\n\n"
        "Question Guidelines:\n"
        "1. Start with phrases like \"Tell me about a time when...\", \"Describe a situation where...\", "
        "\"Give me an example of...\", \"Walk me through...\"\n"
        "2. Focus on past experiences and actual behaviors\n"
        "3. Be specific enough to guide the candidate but open enough for various responses\n"
        "4. Avoid yes/no questions or hypothetical scenarios\n"
        "5. Each question should assess 2-3 specific categories/traits maximum\n\n"
        "Difficulty Levels:\n"
        "- Easy: Common situations most professionals have encountered\n"
        "- Medium: Challenging situations requiring problem-solving or leadership\n"
        "- Hard: Complex scenarios involving ambiguity, failure, or significant impact"
    )


def _detail_lines(records: Sequence, details: Dict[str, str]) -> str:
    lines = []
    for record in records:
        detail = details.get(record.name) or record.description
        lines.append(f"- {record.name}: {detail}" if detail else f"- {record.name}")
    return "\n".join(lines)


def generate_questions_prompt(
    request: GenerationRequest,
    count: int,
    categories: Sequence[Category],
    traits: Sequence[Trait],
    analysis: Optional[JobAnalysis] = None,
) -> str:
    """
    Generate the user prompt for behavioral question generation.

    Args:
        request: The validated generation request.
        count: Number of questions to ask for (already defaulted and range-checked).
        categories: Canonical categories selected by the request.
        traits: Canonical traits selected by the request.
        analysis: Rule-based job description pre-analysis, when one applies.

    Returns:
        The formatted prompt string.
    """
    parts: List[str] = [f"Generate exactly {count} behavioral interview questions"]

    if analysis is not None:
        parts.append(
            "Based on this job description analysis:\n"
            f"- Seniority Level: {analysis.seniority_level}\n"
            f"- Suggested focus areas: {', '.join(analysis.suggested_categories) or 'General'}\n"
            f"- Suggested traits: {', '.join(analysis.suggested_traits) or 'General'}\n"
            f"- Key skills to assess: {', '.join(analysis.key_skills[:5]) or 'Not specified'}"
        )

    if request.difficulty:
        parts.append(f"Generate questions at {request.difficulty.value} difficulty level")
    else:
        parts.append("Generate questions with a mix of difficulty levels")

    if categories:
        parts.append("Focus on these behavioral categories:\n" + _detail_lines(categories, CATEGORY_PROMPT_DETAILS))

    if traits:
        parts.append("Assess these specific traits:\n" + _detail_lines(traits, TRAIT_PROMPT_DETAILS))

    if request.title or request.company:
        role = request.title or "this role"
        at_company = f" at {request.company}" if request.company else ""
        parts.append(f"The candidate is interviewing for {role}{at_company}.")

    if request.has_job_description:
        parts.append(
            f"Job Description:\n{request.job_description.strip()}\n\n"
            "Tailor questions to be relevant to this specific role while maintaining behavioral interview best practices."
        )

    parts.append(
        "For each question, provide a JSON object with the following structure:\n"
        f"{QUESTION_ITEM_SCHEMA}\n\n"
        "IMPORTANT FORMATTING REQUIREMENTS:\n"
        f"- Return ONLY a valid JSON array containing exactly {count} question objects\n"
        "- Start your response with [ and end with ]\n"
        "- Do NOT include any markdown formatting, code blocks, or explanatory text\n"
        "- Each question object must have all five fields: text, suggestedCategories, suggestedTraits, difficulty, reasoning\n\n"
        f"Example of the expected format:\n{QUESTION_EXAMPLE}"
    )

    return "\n\n".join(parts)


def generate_resume_analysis_prompt(resume_text: str) -> str:
    """
    Generate the prompt that extracts experiences and projects from a resume.

    Args:
        resume_text: Plain text of the resume.

    Returns:
        The formatted prompt string.
    """
    return (
        "You are an expert resume analyzer. Extract experiences and projects from this resume text.\n\n"
        "EXTRACTION RULES:\n"
        "1. EXPERIENCES: For each job/internship, create:\n"
        "   - ID: CompanyName_JobTitle (replace spaces with underscores, remove special chars)\n"
        "   - Description: 4-6 bullet points of key responsibilities and achievements\n\n"
        "2. PROJECTS: For each significant project, create:\n"
        "   - ID: ProjectName (descriptive, replace spaces with underscores)\n"
        "   - Description: 3-5 bullet points of what was built, technologies used, and impact\n\n"
        f"RESUME TEXT:\n{resume_text}\n\n"
        "Return ONLY a JSON object with this structure:\n"
        "{\"experiences\": [{\"id\": \"...\", \"description\": \"...\"}], "
        "\"projects\": [{\"id\": \"...\", \"description\": \"...\"}]}"
    )


def generate_consolidation_prompt(old_description: str, new_description: str) -> str:
    return (
        "You are an expert resume analyzer. Consolidate these two experience descriptions into one comprehensive description.\n\n"
        "GUIDELINES:\n"
        "- Combine unique information from both descriptions\n"
        "- Remove redundancy while preserving key details\n"
        "- Maintain 4-6 bullet points maximum\n"
        "- Use action verbs and quantify achievements where possible\n"
        "- Focus on technical skills, impact, and responsibilities\n\n"
        f"OLD DESCRIPTION:\n{old_description}\n\n"
        f"NEW DESCRIPTION:\n{new_description}\n\n"
        "Return only the consolidated description as bullet points, no additional text."
    )


def generate_resume_questions_prompt(
    entity_type: ResumeEntityType,
    entity_id: str,
    description: str,
    count: int,
    categories: Sequence[Category],
    traits: Sequence[Trait],
) -> str:
    """
    Generate the prompt for questions about one resume experience or project.

    The available category and trait names are taken from the canonical
    taxonomy so the model's suggestions have a chance to resolve exactly.
    """
    context_type = "work experience" if entity_type == ResumeEntityType.EXPERIENCE else "project"
    category_block = _detail_lines(categories, CATEGORY_PROMPT_DETAILS)
    trait_names = ", ".join(trait.name for trait in traits)

    return (
        f"Generate exactly {count} behavioral interview questions for this {context_type}.\n\n"
        f"{entity_type.value.upper()} CONTEXT:\n"
        f"ID: {entity_id}\n"
        f"Description: {description}\n\n"
        "QUESTION REQUIREMENTS:\n"
        "- Focus on STAR method (Situation, Task, Action, Result)\n"
        f"- Target technical and soft skills demonstrated in this {context_type}\n"
        "- Vary difficulty levels (easy, medium, hard)\n"
        "- Make questions specific enough to this experience but broad enough for good answers\n\n"
        f"AVAILABLE CATEGORIES (choose relevant ones):\n{category_block}\n\n"
        f"AVAILABLE TRAITS (choose relevant ones):\n- {trait_names}\n\n"
        "For each question, provide a JSON object with the following structure:\n"
        f"{QUESTION_ITEM_SCHEMA}\n\n"
        f"Return ONLY a valid JSON array containing exactly {count} question objects."
    )
