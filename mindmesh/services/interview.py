"""
Interview practice. Question generation, STAR-method scoring and AI evaluation.

The AI paths fall back to the rule-based ones so the practice flow never
hard-fails on an LLM or parse error.
"""

import logging
import random
import re
import uuid
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import LLMError
from . import llm
from .json_extract import extract_json_array, extract_json_object, strip_code_fences
from .prompts import INTERVIEW_ANSWER_EVALUATOR_PROMPT, INTERVIEW_QUESTION_GENERATOR_PROMPT

logger = logging.getLogger(__name__)

Category = Literal["behavioral", "technical", "situational", "role_specific"]
Difficulty = Literal["easy", "medium", "hard"]

CATEGORIES: tuple[Category, ...] = ("behavioral", "technical", "situational", "role_specific")

RECOMMENDED_FOCUS = [
    "Practice the STAR method framework",
    "Use specific metrics in answers",
    "Prepare real examples from experience",
    "Practice clear, concise communication",
]


class InterviewQuestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    category: Category
    question: str
    role: str
    company: Optional[str] = None
    difficulty: Difficulty = "medium"


class InterviewFeedback(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    score: int
    strengths: list[str] = []
    improvements: list[str] = []
    star_method_rating: int = Field(alias="starMethodRating")
    confidence_rating: int = Field(alias="confidenceRating")
    recommended_focus: list[str] = Field(default_factory=list, alias="recommendedFocus")
    summary: str = ""
    star_breakdown: dict[str, str] = Field(default_factory=dict, alias="starBreakdown")


def _question_bank(job_title: str, company: str) -> dict[Category, list[tuple[str, Difficulty]]]:
    company = company.strip() or "the company"
    return {
        "behavioral": [
            ("Tell me about a time you had to work with a difficult team member. How did you handle it?", "easy"),
            ("Describe a situation where you had to learn something new quickly. How did you approach it?", "medium"),
            ("Tell me about a project where you took on a leadership role. What challenges did you face?", "hard"),
            ("Give an example of when you failed and what you learned from it.", "medium"),
            ("Describe a time you had to make a difficult decision with incomplete information.", "hard"),
        ],
        "technical": [
            ("Walk me through your approach to solving a complex technical problem.", "medium"),
            ("How do you stay current with new technologies in your field?", "easy"),
            ("Describe the architecture of a recent project you built.", "hard"),
            ("How would you optimize a slow database query?", "hard"),
            ("Explain a technical concept from your field to a non-technical person.", "medium"),
        ],
        "situational": [
            (f"How would you prioritize multiple urgent tasks from different stakeholders at {company}?", "medium"),
            (f"What would you do if you disagreed with your manager's technical approach at {company}?", "hard"),
            (f"How would you handle a deadline at {company} that was impossible to meet?", "medium"),
            (f"How would you onboard into a large {job_title} role?", "medium"),
            ("What would you do if you realized you made a critical mistake in production?", "hard"),
        ],
        "role_specific": [
            (f"What aspects of a {job_title} role excite you most?", "easy"),
            (f"How would you approach your first 30 days as a {job_title} at {company}?", "medium"),
            (f"What {job_title} skills do you want to develop further?", "medium"),
            (f"How do you measure success in a {job_title} role?", "medium"),
            (f"What do you know about {company}'s tech stack and how does it fit your skills?", "hard"),
        ],
    }


def _question_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:9]}"


def generate_interview_questions(
    job_title: str,
    company: str,
    difficulty: Difficulty = "medium",
    rng: Optional[random.Random] = None,
) -> list[InterviewQuestion]:
    """One predefined question per category. "medium" draws from every difficulty."""
    rng = rng or random.Random()
    bank = _question_bank(job_title, company)

    selected = []
    for category in CATEGORIES:
        candidates = [q for q in bank[category] if difficulty == "medium" or q[1] == difficulty]
        if not candidates:
            continue
        question, level = rng.choice(candidates)
        selected.append(InterviewQuestion(
            id=_question_id(category),
            category=category,
            question=question,
            role=job_title,
            company=company.strip() or None,
            difficulty=level,
        ))
    return selected


async def generate_ai_interview_questions(
    job_title: str,
    company: str,
    difficulty: Difficulty = "medium",
    num_questions: int = 4,
) -> list[InterviewQuestion]:
    """LLM-generated questions, falling back to the predefined bank."""
    prompt = (
        f"Generate exactly {num_questions} interview questions for:\n"
        f"Job Title: {job_title}\nCompany: {company.strip() or 'Not specified'}\nDifficulty Level: {difficulty}\n\n"
        f"Generate EXACTLY {num_questions} questions with a good mix of categories "
        "(behavioral, technical, situational, role-specific).\n"
        "Return ONLY the JSON array, no markdown formatting."
    )
    try:
        reply = await llm.complete_simple(prompt, system=INTERVIEW_QUESTION_GENERATOR_PROMPT, task="planning")
    except LLMError as e:
        logger.warning("AI question generation failed, using predefined questions: %s", e)
        return generate_interview_questions(job_title, company, difficulty)

    items, _ = extract_json_array(reply)
    if not items:
        logger.warning("AI questions unparseable, using predefined questions")
        return generate_interview_questions(job_title, company, difficulty)

    questions = []
    for index, item in enumerate(items[:num_questions]):
        text = item.get("question")
        if not text:
            continue
        category = str(item.get("category", "behavioral")).replace("-", "_").lower()
        level = str(item.get("difficulty", difficulty)).lower()
        questions.append(InterviewQuestion(
            id=_question_id(f"ai-{index}"),
            category=category if category in CATEGORIES else "behavioral",
            question=text,
            role=job_title,
            company=company.strip() or None,
            difficulty=level if level in ("easy", "medium", "hard") else difficulty,
        ))
    return questions or generate_interview_questions(job_title, company, difficulty)


# ── STAR scoring (rule-based) ────────────────────────────────────────

STAR_CUES = {
    "situation": ("situation", "background", "was working", "team"),
    "task": ("task", "responsible", "my goal", "needed to"),
    "action": ("did", "implemented", "built", "created", "performed"),
    "result": ("result", "outcome", "improved", "learned", "succeeded"),
}

STAR_MISSING_HINTS = {
    "situation": "Set the context",
    "task": "Explain your responsibility",
    "action": "Describe what you did",
    "result": "Share the outcome & impact",
}

METRICS_PATTERN = re.compile(r"\d+%|\$\d+|increased|decreased|improved")
CONFLICT_PATTERN = re.compile(r"disagree|challenge|difficult|problem|overcome|failed")


def evaluate_star_method(answer: str) -> dict:
    """Keyword check for each STAR element. Score is the share present, 0-100."""
    text = answer.lower()
    present = {
        element: any(cue in text for cue in cues)
        for element, cues in STAR_CUES.items()
    }
    score = round(sum(present.values()) / len(present) * 100)

    lines = ["STAR Method Analysis:"]
    for element, ok in present.items():
        status = "✓ Present" if ok else f"✗ Missing - {STAR_MISSING_HINTS[element]}"
        lines.append(f"- {element.capitalize()}: {status}")

    return {
        "score": score,
        "feedback": "\n".join(lines),
        "starBreakdown": {element: "✓" if ok else "✗" for element, ok in present.items()},
    }


def score_interview_response(answer: str, question: InterviewQuestion) -> InterviewFeedback:
    star = evaluate_star_method(answer)

    word_count = len(answer.split())
    if 50 < word_count < 300:
        length_score = 20
    elif word_count > 20:
        length_score = 15
    else:
        length_score = 5

    has_metrics = bool(METRICS_PATTERN.search(answer))
    has_conflict = bool(CONFLICT_PATTERN.search(answer))
    base_score = star["score"] + length_score + (20 if has_metrics else 10) + (20 if has_conflict else 10)
    score = min(round(base_score / 3.7), 100)

    strengths = []
    if star["score"] >= 75:
        strengths.append("Strong STAR method structure")
    if has_metrics:
        strengths.append("Used quantifiable results")
    if has_conflict:
        strengths.append("Showed problem-solving ability")
    if word_count > 80:
        strengths.append("Provided substantial detail")

    improvements = []
    if star["score"] < 75:
        improvements.append("Add more STAR structure")
    if not has_metrics:
        improvements.append("Include specific metrics or numbers")
    if word_count < 50:
        improvements.append("Provide more specific examples")
    if question.difficulty == "hard" and base_score < 70:
        improvements.append("Dig deeper into complexity")

    advice = (
        "Focus on strengthening your STAR structure."
        if star["score"] < 75
        else "Good response! Keep practicing to improve consistency."
    )
    return InterviewFeedback(
        score=score,
        strengths=strengths,
        improvements=improvements,
        star_method_rating=star["score"],
        confidence_rating=75 if word_count > 100 else 50,
        recommended_focus=list(RECOMMENDED_FOCUS),
        summary=f"Your answer scored {score}/100. {advice}",
        star_breakdown=star["starBreakdown"],
    )


# Returned when the evaluator reply cannot be used.
EVALUATION_UNAVAILABLE = {
    "score": 70,
    "starMethodRating": 65,
    "strengths": ["Answer provided"],
    "improvements": ["AI evaluation temporarily unavailable. Please try again."],
    "summary": "AI evaluation is processing. Your answer was recorded.",
    "starBreakdown": {"situation": "?", "task": "?", "action": "?", "result": "?"},
}


async def evaluate_answer_with_ai(answer: str, question: str) -> dict:
    """Evaluator payload as returned by the LLM, or the canned fallback."""
    prompt = (
        "Evaluate this interview answer:\n\n"
        f"Question: {question}\n\n"
        f"Candidate's Answer: {answer}\n\n"
        "Remember: Return ONLY the JSON object, no markdown formatting."
    )
    try:
        reply = await llm.complete_simple(
            prompt, system=INTERVIEW_ANSWER_EVALUATOR_PROMPT,
            task="planning", temperature=0.3, max_tokens=800,
        )
    except LLMError as e:
        logger.warning("AI evaluation failed: %s", e)
        return dict(EVALUATION_UNAVAILABLE)

    evaluation = extract_json_object(strip_code_fences(reply))
    if evaluation is None:
        logger.warning("AI evaluation unparseable: %s", reply[:200])
        return dict(EVALUATION_UNAVAILABLE)
    return evaluation


def calculate_mock_interview_score(scores: list[int]) -> dict:
    scored = [s for s in scores if s and s > 0]
    if not scored:
        return {
            "overallScore": 0,
            "categoryScores": {},
            "recommendations": ["Complete all interview questions to calculate score"],
        }

    overall = round(sum(scored) / len(scored))
    recommendations = []
    if overall >= 80:
        recommendations.append("Excellent! You're ready for interviews.")
    if overall >= 70:
        recommendations.append("Good foundation. Practice a few more rounds.")
    else:
        recommendations.append("Keep practicing. Focus on STAR method and specific examples.")
    recommendations += [
        "Record yourself answering and listen back for clarity and pace",
        "Practice with a friend or mentor for live feedback",
    ]
    return {"overallScore": overall, "categoryScores": {}, "recommendations": recommendations}
