"""
Reflection agent. Turns user feedback on a piece of advice into a stored lesson.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import LLMError
from ..models.metadata import ReflectionMeta
from . import llm
from .memory import store_memory
from .prompts import REFLECTION_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


@dataclass
class ReflectionResult:
    reflection: str
    success: bool = True


def fallback_lesson(feedback: str) -> str:
    return f"User reported dissatisfaction: {feedback}"


async def reflect(
    db: AsyncSession,
    user_id: str,
    feedback: str,
    previous_advice: str,
) -> ReflectionResult:
    """
    Extract and store one lesson. Never fails on LLM errors: the raw
    feedback is stored instead, so a reflection always exists afterwards.
    """
    messages = [
        {"role": "system", "content": REFLECTION_SYSTEM_PROMPT},
        {"role": "user", "content": f"ADVICE GIVEN:\n{previous_advice}\n\nUSER FEEDBACK:\n{feedback}"},
    ]

    try:
        lesson = (await llm.complete(messages, task="chat")).strip()
    except LLMError as e:
        logger.warning("Reflection failed, storing raw feedback: %s", e)
        lesson = fallback_lesson(feedback)

    await store_memory(
        db, user_id, lesson,
        ReflectionMeta(outcome="failure", source_feedback=feedback),
    )
    logger.info("Reflection stored for user=%s: %s", user_id, lesson[:100])
    return ReflectionResult(reflection=lesson)
