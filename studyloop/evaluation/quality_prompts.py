"""
Quality assessment prompts.

One judge persona and checklist per content type, rendered into a single
scoring prompt that asks for the four dimension scores as JSON.

Dependencies: studyloop.core.content_types
System role: Prompt text for the Quality Validator
"""

from dataclasses import dataclass, field

from studyloop.core.content_types import ContentType


@dataclass(frozen=True)
class JudgePrompt:
    system: str
    subject_noun: str
    criteria: tuple[str, str, str, str]
    extra_checks: tuple[str, ...] = field(default_factory=tuple)


GENERIC_PROMPT = JudgePrompt(
    system="You are an educational content quality assessor. Evaluate study material for accuracy, clarity, and educational value.",
    subject_noun="study material",
    criteria=(
        "Are all facts correct and up-to-date?",
        "Is it clear and well-structured?",
        "Does it teach something worth knowing?",
        "Is the language and complexity appropriate?",
    ),
)

QUALITY_PROMPTS: dict[ContentType, JudgePrompt] = {
    ContentType.GOLDEN_NOTES: JudgePrompt(
        system="You are an educational content quality assessor. Evaluate golden notes for accuracy, clarity, and educational value.",
        subject_noun="golden note",
        criteria=(
            "Are all facts correct and up-to-date?",
            "Is it clear and well-structured?",
            "Does it highlight key concepts effectively?",
            "Is the language and complexity appropriate?",
        ),
    ),
    ContentType.CUECARDS: JudgePrompt(
        system="You are an educational content quality assessor. Evaluate cuecards for learning effectiveness.",
        subject_noun="cuecard",
        criteria=(
            "Is the question and answer factually correct?",
            "Are question and answer clear?",
            "Does it test important knowledge?",
            "Is the difficulty level appropriate?",
        ),
    ),
    ContentType.MULTIPLE_CHOICE: JudgePrompt(
        system="You are an educational content quality assessor. Evaluate multiple choice questions for assessment quality.",
        subject_noun="multiple choice question",
        criteria=(
            "Is the question and correct answer accurate?",
            "Is the question clear and unambiguous?",
            "Does it test meaningful knowledge?",
            "Is the difficulty appropriate?",
        ),
        extra_checks=(
            "Are distractors plausible but clearly incorrect?",
            "Is there only one correct answer?",
            "Is the explanation helpful?",
        ),
    ),
    ContentType.OPEN_QUESTIONS: JudgePrompt(
        system="You are an educational content quality assessor. Evaluate open-ended questions for critical thinking assessment.",
        subject_noun="open question",
        criteria=(
            "Is the context and sample answer accurate?",
            "Is the question clear and well-formulated?",
            "Does it promote critical thinking?",
            "Is the complexity appropriate?",
        ),
        extra_checks=(
            "Does it encourage deep thinking?",
            "Is the grading rubric comprehensive?",
            "Is the sample answer helpful but not overprescriptive?",
        ),
    ),
    ContentType.SUMMARIES: JudgePrompt(
        system="You are an educational content quality assessor. Evaluate summaries for comprehensiveness and accuracy.",
        subject_noun="summary",
        criteria=(
            "Are all facts and concepts correct?",
            "Is it well-organized and clear?",
            "Does it capture key information effectively?",
            "Is the language level appropriate?",
        ),
        extra_checks=(
            "Does it cover main points without being too verbose?",
            "Is the information hierarchy clear?",
        ),
    ),
    ContentType.CONCEPT_MAPS: JudgePrompt(
        system="You are an educational content quality assessor. Evaluate concept maps for conceptual accuracy and structure.",
        subject_noun="concept map",
        criteria=(
            "Are the concepts and their relationships correct?",
            "Are node labels and descriptions clear?",
            "Does the structure reveal how the key ideas connect?",
            "Is the depth appropriate for the audience?",
        ),
        extra_checks=(
            "Does every edge connect two existing nodes?",
            "Are relationship types meaningful rather than generic?",
        ),
    ),
}


def get_judge_prompt(content_type: ContentType | None) -> JudgePrompt:
    """Judge prompt for a content type, generic when unknown."""
    if content_type is None:
        return GENERIC_PROMPT
    return QUALITY_PROMPTS.get(content_type, GENERIC_PROMPT)


def build_assessment_prompt(
    prompt: JudgePrompt,
    content: str,
    subject: str | None = None,
    grade_level: str | None = None,
) -> str:
    """Render the scoring prompt for one piece of content."""
    subject_clause = f" for {subject}" if subject else ""
    audience = f"\nTarget audience: {grade_level} students\n" if grade_level else ""
    factual, readability, educational, age = prompt.criteria
    checks = ""
    if prompt.extra_checks:
        checks = "\nAlso check:\n" + "\n".join(f"- {check}" for check in prompt.extra_checks) + "\n"

    return f"""Evaluate this {prompt.subject_noun}{subject_clause}:
{audience}
{content}

Rate each aspect (0-100) and provide specific feedback:
1. Factual Accuracy - {factual}
2. Readability - {readability}
3. Educational Value - {educational}
4. Age Appropriateness - {age}
{checks}
Respond in JSON format ONLY (no markdown, no extra text):
{{
  "factualAccuracy": <score>,
  "readability": <score>,
  "educationalValue": <score>,
  "ageAppropriateness": <score>,
  "feedback": ["specific feedback"],
  "shouldRegenerate": <boolean>
}}"""
