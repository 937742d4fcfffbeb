"""
Onboarding API.

POST /api/onboarding/extract — Build a structured profile from onboarding answers
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_db, get_user
from ..core.errors import LLMError
from ..services.onboarding import ProfileParseError, extract_profile

logger = logging.getLogger(__name__)

onboarding_router = APIRouter(prefix="/onboarding", tags=["onboarding"])


class OnboardingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    education: Optional[str] = None
    experience: Optional[str] = None
    skills: Optional[str] = None
    goals: Optional[str] = None
    resume_text: Optional[str] = Field(default=None, alias="resumeText")


class OnboardingResponse(BaseModel):
    profile: dict
    success: bool = True


@onboarding_router.post("/extract", response_model=OnboardingResponse)
async def extract(
    request: OnboardingRequest,
    user: AuthenticatedUser = Depends(get_user),
    db: AsyncSession = Depends(get_db),
):
    """Extract profile data with confidence scores. Any single field is enough."""
    fields = request.model_dump()
    if not any(value and value.strip() for value in fields.values()):
        raise HTTPException(
            status_code=400,
            detail="Please provide at least one field (education, experience, skills, goals, or resume)",
        )

    try:
        profile = await extract_profile(db, user.user_id, **fields)
    except ProfileParseError as e:
        raise LLMError(f"Failed to parse profile data: {e}") from e

    return OnboardingResponse(profile=profile)
