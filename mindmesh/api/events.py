"""
Events API — client analytics.

POST /api/events/log — Record one user action
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_db, get_user
from ..models.event import Event

logger = logging.getLogger(__name__)

events_router = APIRouter(prefix="/events", tags=["events"])


class LogEventRequest(BaseModel):
    category: str = Field(min_length=1, max_length=64)
    action: str = Field(min_length=1, max_length=128)
    context: Optional[dict] = None


class LogEventResponse(BaseModel):
    id: str
    created_at: datetime


@events_router.post("/log", response_model=LogEventResponse, status_code=201)
async def log_event(
    request: LogEventRequest,
    user: AuthenticatedUser = Depends(get_user),
    db: AsyncSession = Depends(get_db),
):
    event = Event(
        user_id=user.user_id,
        category=request.category,
        action=request.action,
        context=request.context,
    )
    db.add(event)
    await db.flush()
    logger.debug("Event %s/%s from user=%s", event.category, event.action, user.user_id)
    return LogEventResponse(id=event.id, created_at=event.created_at)
