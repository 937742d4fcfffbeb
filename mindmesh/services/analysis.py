"""
Career pattern analysis across interview results and job applications.
"""

import json
import logging
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import LLMError
from . import llm
from .json_extract import extract_json_object, strip_code_fences, strip_model_tokens
from .prompts import CAREER_PATTERN_ANALYZER_PROMPT

logger = logging.getLogger(__name__)


class InterviewRecord(BaseModel):
    score: float = 0
    date: str = ""
    role: str = ""
    company: Optional[str] = None
    strengths: list[str] = []
    weaknesses: list[str] = []


class ApplicationRecord(BaseModel):
    company: str = ""
    role: str = ""
    status: str = "applied"
    outcome: Optional[Literal["rejected", "pending", "offer"]] = None
    stage: Optional[str] = None
    date: str = ""
    notes: Optional[str] = None


class CareerProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    skills: list[str] = []
    target_roles: list[str] = Field(default_factory=list, alias="targetRoles")
    experience: str = ""
    current_role: Optional[str] = Field(default=None, alias="currentRole")


def build_prompt(
    interviews: list[InterviewRecord],
    applications: list[ApplicationRecord],
    profile: CareerProfile,
) -> str:
    interview_json = json.dumps([i.model_dump(exclude_none=True) for i in interviews], indent=2)
    application_json = json.dumps([a.model_dump(exclude_none=True) for a in applications], indent=2)
    return (
        "Analyze the following career data and provide pattern insights:\n\n"
        f"Interview History: {interview_json}\n\n"
        f"Application History: {application_json}\n\n"
        "User Profile:\n"
        f"- Skills: {', '.join(profile.skills)}\n"
        f"- Target Roles: {', '.join(profile.target_roles)}\n"
        f"- Experience: {profile.experience}\n\n"
        "Provide detailed analysis with patterns, root causes, and actionable recommendations.\n"
        "Remember: Return ONLY valid JSON, no markdown formatting."
    )


def fallback_analysis(
    interviews: list[InterviewRecord],
    applications: list[ApplicationRecord],
    profile: CareerProfile,
) -> dict:
    """Data-driven analysis used when the LLM reply is unusable."""
    interview_count = len(interviews)
    avg_score = round(sum(i.score for i in interviews) / interview_count) if interview_count else 0
    application_count = len(applications)
    offers = sum(1 for a in applications if a.outcome == "offer")
    acceptance_rate = round(offers / application_count * 100) if application_count else 0

    if acceptance_rate > 0:
        offer_text = f"You've received {offers} offer(s) with a {acceptance_rate}% acceptance rate."
    else:
        offer_text = "Track more applications to see acceptance patterns."

    return {
        "summary": (
            f"Your career journey shows {interview_count} interviews and {application_count} applications. "
            f"Average interview score: {avg_score}/100. {offer_text} "
            "Focus on consistent practice and strategic targeting."
        ),
        "patterns": [
            "Building interview experience - need more practice sessions"
            if interview_count < 5 else "Interview performance trending upward",
            "Early stage in job search - continue applying broadly"
            if application_count < 10 else "Active job search with multiple applications",
            "Lower than average acceptance rate - strategy adjustment needed"
            if acceptance_rate < 20 and application_count > 5 else "Healthy application funnel",
        ],
        "strengths": [
            f"Completed {interview_count} mock interviews" if interview_count else "Starting interview preparation",
            f"Targeting roles in: {', '.join(profile.target_roles) or 'various positions'}",
            f"Building expertise in: {', '.join(profile.skills[:3])}" if profile.skills else "Skill development in progress",
        ],
        "weaknesses": [
            "Need more interview practice" if interview_count < 5 else "Refine advanced interview techniques",
            "Improve resume/application quality"
            if acceptance_rate < 30 and application_count > 3 else "Strengthen application targeting",
            "Expand professional network",
        ],
        "rootCauses": [
            "Insufficient interview data - complete more mock interviews"
            if interview_count < 5 else "Inconsistent performance across interviews",
            "Potential resume/ATS optimization issue or role mismatch"
            if acceptance_rate == 0 and application_count > 3 else "Market factors and role-specific requirements",
            "Limited networking - most opportunities come through connections",
        ],
        "recommendations": [
            f"Complete {10 - interview_count} more mock interviews this month"
            if interview_count < 10 else "Continue interview practice 3x per week",
            "Update resume with quantified achievements",
            "Reach out to 3-5 networking contacts weekly",
            "Focus on top 3 target companies",
            f"Study {profile.skills[0] if profile.skills else 'core'} skills more deeply",
        ],
        "actionPlan": {
            "thisMonth": [
                f"Complete {max(3, 10 - interview_count)} mock interviews",
                "Apply to 5-10 target roles",
                "Update resume with recent accomplishments",
                "Network with 2-3 professionals in target roles",
            ],
            "nextMonth": [
                "Review interview recordings and improve weak areas",
                "Apply to 5-10 more roles based on patterns",
                "Complete 3-5 more mock interviews",
                "Follow up on pending applications",
            ],
        },
    }


async def analyze_career_patterns(
    interviews: list[InterviewRecord],
    applications: list[ApplicationRecord],
    profile: CareerProfile,
) -> dict:
    try:
        reply = await llm.complete_simple(
            build_prompt(interviews, applications, profile),
            system=CAREER_PATTERN_ANALYZER_PROMPT,
            task="planning", temperature=0.3, max_tokens=2500,
        )
    except LLMError as e:
        logger.warning("Pattern analysis LLM call failed, using fallback: %s", e)
        return fallback_analysis(interviews, applications, profile)

    analysis = extract_json_object(strip_code_fences(strip_model_tokens(reply)))
    if analysis is None:
        logger.warning("Pattern analysis unparseable, using fallback")
        return fallback_analysis(interviews, applications, profile)
    return analysis
