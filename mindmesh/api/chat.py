"""
Chat API — stateless career chat.

POST /api/chat — Reply to a client-held conversation
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_user
from ..core.guardrails import check_input
from ..services import llm
from ..services.prompts import GENERAL_CHAT_PROMPT

logger = logging.getLogger(__name__)

chat_router = APIRouter(tags=["chat"])

MAX_HISTORY = 20


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    messages: list[ChatMessage]


class ChatResponse(BaseModel):
    role: str = "assistant"
    content: str


@chat_router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    user: AuthenticatedUser = Depends(get_user),
):
    """Nothing is stored; the client sends the whole conversation each time."""
    if not request.messages:
        raise HTTPException(status_code=400, detail="Messages array is required")

    latest = request.messages[-1]
    check = check_input(latest.content, user_id=user.user_id)
    if not check.allowed:
        raise HTTPException(status_code=400, detail=check.reason)

    history = [m.model_dump() for m in request.messages[-MAX_HISTORY:]]
    content = await llm.complete(
        [{"role": "system", "content": GENERAL_CHAT_PROMPT}, *history],
        task="chat",
    )
    return ChatResponse(content=content)
