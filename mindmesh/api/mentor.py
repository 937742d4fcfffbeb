"""
Mentor API.

POST /api/mentor/respond     — Memory-aware mentor advice
POST /api/mentor/reflect     — Store a lesson from user feedback
POST /api/mentor/trajectory  — Simulate 2-3 career trajectories
GET  /api/mentor/memories    — Recent memory records (dashboard)
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_db, get_user
from ..core.guardrails import check_input
from ..services import mentor, reflection, trajectory
from ..services.memory import fetch_recent_memories

logger = logging.getLogger(__name__)

mentor_router = APIRouter(prefix="/mentor", tags=["mentor"])


def _validated(message: str, user: AuthenticatedUser) -> str:
    check = check_input(message, user_id=user.user_id)
    if not check.allowed:
        raise HTTPException(status_code=400, detail=check.reason)
    return message


# ── Respond ──────────────────────────────────────────────────────────

class RespondRequest(BaseModel):
    message: str


class RespondResponse(BaseModel):
    response: str
    success: bool = True


@mentor_router.post("/respond", response_model=RespondResponse)
async def respond(
    request: RespondRequest,
    user: AuthenticatedUser = Depends(get_user),
    db: AsyncSession = Depends(get_db),
):
    """Generate advice using the user's memory and past lessons."""
    message = _validated(request.message, user)
    logger.info("Mentor request from user=%s (%d chars)", user.user_id, len(message))
    reply = await mentor.respond(db, user.user_id, message)
    return RespondResponse(response=reply.response, success=reply.success)


# ── Reflect ──────────────────────────────────────────────────────────

class ReflectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    previous_advice: str = Field(alias="previousAdvice")


class ReflectResponse(BaseModel):
    success: bool = True
    reflection: str


@mentor_router.post("/reflect", response_model=ReflectResponse)
async def reflect(
    request: ReflectRequest,
    user: AuthenticatedUser = Depends(get_user),
    db: AsyncSession = Depends(get_db),
):
    """Turn feedback on a previous answer into a stored lesson."""
    if not request.message.strip() or not request.previous_advice.strip():
        raise HTTPException(status_code=400, detail="Message and previousAdvice are required")

    result = await reflection.reflect(
        db, user.user_id, _validated(request.message, user), request.previous_advice,
    )
    return ReflectResponse(success=result.success, reflection=result.reflection)


# ── Trajectory ───────────────────────────────────────────────────────

class TrajectoryRequest(BaseModel):
    message: str


@mentor_router.post(
    "/trajectory",
    response_model=trajectory.TrajectoryResult,
    response_model_exclude_none=True,
)
async def simulate_trajectory(
    request: TrajectoryRequest,
    user: AuthenticatedUser = Depends(get_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Simulate future career paths for a decision.

    Unparseable model output still returns 200 with trajectories=[] and
    the raw reply under rawResponse.
    """
    decision = _validated(request.message, user)
    return await trajectory.simulate(db, user.user_id, decision)


# ── Memories ─────────────────────────────────────────────────────────

class MemoryItem(BaseModel):
    id: str
    content: str
    type: Optional[str] = None
    metadata: dict = {}
    created_at: datetime


@mentor_router.get("/memories", response_model=list[MemoryItem])
async def list_memories(
    limit: int = Query(default=20, ge=1, le=100),
    user: AuthenticatedUser = Depends(get_user),
    db: AsyncSession = Depends(get_db),
):
    """Most recent memory records for the current user, newest first."""
    memories = await fetch_recent_memories(db, user.user_id, limit=limit)
    return [
        MemoryItem(id=m.id, content=m.content, type=m.type, metadata=m.metadata, created_at=m.created_at)
        for m in memories
    ]
