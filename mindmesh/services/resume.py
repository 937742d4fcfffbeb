"""
Resume parsing. Structured fields from raw resume text, optionally persisted.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.flags import get_flags
from ..models.resume import Resume
from . import llm
from .json_extract import extract_json_object
from .prompts import RESUME_PARSE_PROMPT

logger = logging.getLogger(__name__)

MIN_RESUME_CHARS = 10


async def parse_resume_text(resume_text: str) -> dict:
    """LLM extraction. Unparseable replies come back as {extractedText, parseError}."""
    reply = await llm.complete(
        [{"role": "user", "content": RESUME_PARSE_PROMPT.format(resume_text=resume_text)}],
        task="planning",
    )
    logger.info("Resume parse reply: %d chars", len(reply))

    parsed = extract_json_object(reply)
    if parsed is None:
        logger.warning("Resume reply was not JSON: %s", reply[:100])
        return {
            "extractedText": reply,
            "parseError": "Could not parse AI response as JSON",
        }
    return parsed


async def save_resume(db: AsyncSession, user_id: str, data: dict, raw_text: str) -> bool:
    """Persist a parsed resume. Failures are logged, never raised."""
    if not get_flags().persist_resumes:
        return False
    try:
        db.add(Resume(user_id=user_id, data=data, raw_text=raw_text))
        await db.commit()
        return True
    except Exception as e:
        await db.rollback()
        logger.warning("Resume persist failed for user=%s: %s", user_id, e)
        return False
