"""
Trajectory agent. Simulates 2-3 alternative career paths for a decision.
"""

import logging
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.metadata import TrajectoryMeta
from . import llm
from .json_extract import extract_json_array
from .memory import fetch_recent_memories, format_memories_for_prompt, store_memory
from .prompts import TRAJECTORY_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

TRAJECTORY_MEMORY_LIMIT = 12
PARSE_FAILURE_MESSAGE = "Failed to parse trajectory JSON, returning raw response"

Level = Literal["low", "medium", "high"]


class Trajectory(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = "Unnamed trajectory"
    assumptions: list[str] = []
    short_term_outcomes: list[str] = Field(default_factory=list, alias="shortTermOutcomes")
    long_term_outcomes: list[str] = Field(default_factory=list, alias="longTermOutcomes")
    risks: list[str] = []
    effort_level: Level = Field(default="medium", alias="effortLevel")
    confidence: Level = "medium"

    @field_validator("effort_level", "confidence", mode="before")
    @classmethod
    def _normalize_level(cls, value):
        # Models sometimes answer "Medium" or "medium-high".
        if isinstance(value, str):
            lowered = value.strip().lower()
            for level in ("high", "medium", "low"):
                if lowered.startswith(level):
                    return level
        return "medium"

    @field_validator("assumptions", "short_term_outcomes", "long_term_outcomes", "risks", mode="before")
    @classmethod
    def _listify(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [str(v) for v in value]


class TrajectoryResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    trajectories: list[Trajectory] = []
    decision_context: Optional[str] = Field(default=None, alias="decisionContext")
    raw_response: Optional[str] = Field(default=None, alias="rawResponse")
    error: Optional[str] = None
    success: bool = True


def build_messages(memory_context: str, decision: str) -> list[dict]:
    return [
        {
            "role": "system",
            "content": f"{TRAJECTORY_SYSTEM_PROMPT}\n\n## CONTEXT FROM PAST INTERACTIONS\n{memory_context}",
        },
        {
            "role": "user",
            "content": (
                f"Decision/Question: {decision}\n\n"
                "Please generate 2-3 trajectory options based on the context above."
            ),
        },
    ]


def parse_trajectories(text: str) -> Optional[list[Trajectory]]:
    """Run the extraction cascade. None when no strategy yields a usable array."""
    items, strategy = extract_json_array(text)
    if items is None:
        return None

    trajectories = []
    for item in items:
        try:
            trajectories.append(Trajectory.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping malformed trajectory: %s", e)
    if not trajectories:
        return None

    logger.info("Parsed %d trajectories via %s", len(trajectories), strategy)
    return trajectories


def summarize(trajectories: list[Trajectory]) -> str:
    return "Trajectory Analysis: " + ", ".join(t.name for t in trajectories)


async def simulate(db: AsyncSession, user_id: str, decision: str) -> TrajectoryResult:
    """
    Ask the LLM for trajectories and parse them.

    A reply that cannot be parsed is not an error: the raw text comes back
    for display and nothing is stored. Only the trajectory names are
    persisted, as a one-line summary.
    """
    memories = await fetch_recent_memories(db, user_id, limit=TRAJECTORY_MEMORY_LIMIT)
    memory_context = format_memories_for_prompt(memories)
    logger.info("Trajectory: fetched %d memories for user=%s", len(memories), user_id)

    reply = await llm.complete(build_messages(memory_context, decision), task="simulation")

    trajectories = parse_trajectories(reply)
    if trajectories is None:
        logger.error("Trajectory: failed to parse JSON from %d chars", len(reply))
        return TrajectoryResult(
            trajectories=[],
            raw_response=reply,
            error=PARSE_FAILURE_MESSAGE,
            success=False,
        )

    await store_memory(
        db, user_id, summarize(trajectories),
        TrajectoryMeta(
            context="trajectory_simulation",
            decision_context=decision,
            trajectories_count=len(trajectories),
        ),
    )
    return TrajectoryResult(trajectories=trajectories, decision_context=decision)
