"""
Core mentor pipeline.

fetch memories → format context → store input → call LLM →
enforce lessons on the output → store advice → return.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.metadata import MentorAdviceMeta, UserInputMeta
from . import llm
from .memory import MemoryRecord, fetch_recent_memories, format_memories_for_prompt, store_memory
from .prompts import CORE_MENTOR_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

MENTOR_MEMORY_LIMIT = 8
CONVERSATION_CONTEXT = "mentor_conversation"

ACK_MARKER = "📌"
ACK_PHRASES = ("past feedback", "learning from")
LESSON_PREVIEW_CHARS = 100

CONCISE_KEYWORDS = ("concise", "shorter", "brief")
DETAILED_KEYWORDS = ("long", "detailed", "comprehensive", "more information", "more detail")
MAX_CONCISE_WORDS = 150
SHORTENED_NOTICE = "...\n\n[Response shortened based on your feedback for brevity]"


@dataclass
class MentorReply:
    response: str
    success: bool = True


# ── Lesson enforcement ───────────────────────────────────────────────

def has_acknowledgment(text: str) -> bool:
    lowered = text.lower()
    return ACK_MARKER in text or any(phrase in lowered for phrase in ACK_PHRASES)


def acknowledge_lesson(text: str, lesson: str) -> str:
    return (
        f"{ACK_MARKER} Learning from past feedback: {lesson[:LESSON_PREVIEW_CHARS]}..."
        f"\n\nHere's my adapted approach:\n\n{text}"
    )


def wants_concise(lesson: str) -> bool:
    lowered = lesson.lower()
    needs_concise = any(k in lowered for k in CONCISE_KEYWORDS)
    needs_detailed = any(k in lowered for k in DETAILED_KEYWORDS)
    return needs_concise and not needs_detailed


def truncate_words(text: str, max_words: int = MAX_CONCISE_WORDS) -> str:
    """Word-count slice; not sentence aware."""
    words = text.split()
    if len(words) <= max_words:
        return text
    return " ".join(words[:max_words]) + SHORTENED_NOTICE


def enforce_lessons(text: str, memories: list[MemoryRecord]) -> str:
    """
    Post-process a mentor reply against stored reflections.

    All reflections are shown to the model, but only the newest one
    (memories arrive newest-first) drives the acknowledgment and the
    length ceiling.
    """
    reflections = [m for m in memories if m.is_reflection]
    if not reflections:
        return text

    latest = reflections[0].content
    logger.info("Validating response against %d lessons", len(reflections))

    if not has_acknowledgment(text):
        logger.info("Response missing lesson acknowledgment - prepending")
        text = acknowledge_lesson(text, latest)

    if wants_concise(latest):
        shortened = truncate_words(text)
        if shortened != text:
            logger.info("Response too long (%d words), truncating to %d", len(text.split()), MAX_CONCISE_WORDS)
        text = shortened

    return text


# ── Pipeline ─────────────────────────────────────────────────────────

def build_messages(memory_context: str, message: str) -> list[dict]:
    return [
        {"role": "system", "content": f"{CORE_MENTOR_SYSTEM_PROMPT}\n\n{memory_context}"},
        {"role": "user", "content": message},
    ]


async def respond(db: AsyncSession, user_id: str, message: str) -> MentorReply:
    """
    Generate adaptive advice for one user message.

    The input is stored before the LLM call so it survives a failed
    generation. LLM errors propagate; nothing is retried or queued here.
    """
    memories = await fetch_recent_memories(db, user_id, limit=MENTOR_MEMORY_LIMIT)
    memory_context = format_memories_for_prompt(memories)
    logger.debug("Mentor context for user=%s: %s", user_id, memory_context[:500])

    await store_memory(db, user_id, message, UserInputMeta(context=CONVERSATION_CONTEXT))

    reply = await llm.complete(build_messages(memory_context, message), task="chat")
    reply = enforce_lessons(reply, memories)

    await store_memory(
        db, user_id, reply,
        MentorAdviceMeta(context=CONVERSATION_CONTEXT, user_input=message),
    )
    return MentorReply(response=reply)
