"""
Main API router. Mounts all sub-routers.
"""

from fastapi import APIRouter, Depends

from ..core.dependencies import get_user

router = APIRouter()


# ── Health (no auth) ─────────────────────────────────────────────────

@router.get("/health")
async def health():
    return {"ok": True}


# ── API routes ──────────────────────────────────────────────────────

from .mentor import mentor_router
from .chat import chat_router
from .onboarding import onboarding_router
from .interview import interview_router
from .career import career_router
from .events import events_router
from .resume import resume_router

router.include_router(mentor_router, prefix="/api", dependencies=[Depends(get_user)])
router.include_router(chat_router, prefix="/api", dependencies=[Depends(get_user)])
router.include_router(onboarding_router, prefix="/api", dependencies=[Depends(get_user)])
router.include_router(interview_router, prefix="/api", dependencies=[Depends(get_user)])
router.include_router(career_router, prefix="/api", dependencies=[Depends(get_user)])
router.include_router(events_router, prefix="/api", dependencies=[Depends(get_user)])
# Resume parsing works anonymously; storage happens only for signed-in users.
router.include_router(resume_router, prefix="/api")
