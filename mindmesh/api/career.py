"""
Career analytics API.

POST /api/career/analyze-patterns — Patterns across interviews and applications
"""

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from ..services.analysis import (
    ApplicationRecord,
    CareerProfile,
    InterviewRecord,
    analyze_career_patterns,
)

career_router = APIRouter(prefix="/career", tags=["career"])


class AnalyzePatternsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    interviews: list[InterviewRecord] = Field(default_factory=list, alias="interviewHistory")
    applications: list[ApplicationRecord] = Field(default_factory=list, alias="applicationHistory")
    user_profile: CareerProfile = Field(default_factory=CareerProfile, alias="userProfile")


@career_router.post("/analyze-patterns")
async def analyze_patterns(request: AnalyzePatternsRequest):
    analysis = await analyze_career_patterns(
        request.interviews, request.applications, request.user_profile,
    )
    return {"analysis": analysis}
