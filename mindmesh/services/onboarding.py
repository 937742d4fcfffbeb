"""
Onboarding agent. Builds an initial career profile from questionnaire
answers and resume text, with per-field confidence scores.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.metadata import UserProfileMeta
from . import llm
from .json_extract import extract_json_object
from .memory import store_memory
from .prompts import ONBOARDING_AGENT_PROMPT

logger = logging.getLogger(__name__)


class ProfileParseError(ValueError):
    """The LLM reply held no parseable profile object."""

    def __init__(self, raw: str):
        super().__init__("The AI returned invalid JSON. Please try again or simplify your inputs.")
        self.raw = raw


def build_onboarding_input(
    education: Optional[str] = None,
    experience: Optional[str] = None,
    skills: Optional[str] = None,
    goals: Optional[str] = None,
    resume_text: Optional[str] = None,
) -> str:
    sections = [
        ("EDUCATION", education),
        ("WORK EXPERIENCE", experience),
        ("SKILLS", skills),
        ("CAREER GOALS", goals),
    ]
    text = "\n\n".join(f"{title}:\n{value or 'Not provided'}" for title, value in sections)
    if resume_text:
        text += f"\n\nRESUME:\n{resume_text}"
    return text.strip()


def summarize_profile(profile: dict) -> str:
    skills = profile.get("skills") or {}
    technical = skills.get("technical") if isinstance(skills, dict) else None
    conflicts = profile.get("conflicts") or []

    summary = (
        f"Profile Genesis: {len(profile.get('education') or [])} education entries, "
        f"{len(profile.get('workExperience') or [])} work experiences, "
        f"{len(technical or [])} technical skills. "
        f"Overall Confidence: {profile.get('confidenceScore')}%."
    )
    if conflicts:
        summary += f" Detected {len(conflicts)} potential conflicts."
    return summary


async def extract_profile(
    db: AsyncSession,
    user_id: str,
    education: Optional[str] = None,
    experience: Optional[str] = None,
    skills: Optional[str] = None,
    goals: Optional[str] = None,
    resume_text: Optional[str] = None,
) -> dict:
    """Returns the profile dict. Raises ProfileParseError or LLMError."""
    user_input = build_onboarding_input(education, experience, skills, goals, resume_text)
    messages = [
        {"role": "system", "content": ONBOARDING_AGENT_PROMPT},
        {"role": "user", "content": user_input},
    ]

    reply = await llm.complete(messages, task="planning")
    profile = extract_json_object(reply)
    if profile is None:
        logger.error("Onboarding: invalid profile JSON: %s", reply[:500])
        raise ProfileParseError(reply)

    confidence = profile.get("confidenceScore")
    await store_memory(
        db, user_id, summarize_profile(profile),
        UserProfileMeta(
            context="onboarding",
            profile_data=profile,
            confidence_score=confidence if isinstance(confidence, (int, float)) else None,
        ),
    )
    logger.info("Onboarding: profile stored for user=%s", user_id)
    return profile
