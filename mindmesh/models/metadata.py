"""
Memory metadata variants, discriminated by `type`.

Each variant carries only the fields its writer sets. Extra keys written by
older clients are kept (extra="allow") so nothing is lost on read.
"""

import logging
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)


class _MetaBase(BaseModel):
    model_config = ConfigDict(extra="allow")


class UserInputMeta(_MetaBase):
    type: Literal["user_input"] = "user_input"
    context: Optional[str] = None


class MentorAdviceMeta(_MetaBase):
    type: Literal["mentor_advice"] = "mentor_advice"
    context: Optional[str] = None
    user_input: Optional[str] = None


class ReflectionMeta(_MetaBase):
    type: Literal["reflection"] = "reflection"
    # Always "failure" today, even for positive feedback.
    outcome: str = "failure"
    source_feedback: Optional[str] = None


class TrajectoryMeta(_MetaBase):
    type: Literal["trajectory"] = "trajectory"
    context: Optional[str] = None
    decision_context: Optional[str] = None
    trajectories_count: int = 0


class UserProfileMeta(_MetaBase):
    type: Literal["user_profile"] = "user_profile"
    context: Optional[str] = None
    profile_data: Optional[Any] = None
    confidence_score: Optional[float] = None


MemoryMetadata = Annotated[
    Union[UserInputMeta, MentorAdviceMeta, ReflectionMeta, TrajectoryMeta, UserProfileMeta],
    Field(discriminator="type"),
]

MEMORY_TYPES = {"user_input", "mentor_advice", "reflection", "trajectory", "user_profile"}

_adapter: TypeAdapter = TypeAdapter(MemoryMetadata)


def parse_metadata(raw: Optional[dict]) -> Optional[MemoryMetadata]:
    """Parse a stored metadata dict. Untyped or unknown types return None."""
    if not isinstance(raw, dict) or raw.get("type") not in MEMORY_TYPES:
        return None
    try:
        return _adapter.validate_python(raw)
    except ValidationError as e:
        logger.warning("Unreadable %s metadata: %s", raw.get("type"), e)
        return None


def dump_metadata(meta: MemoryMetadata) -> dict:
    return meta.model_dump(exclude_none=True)
