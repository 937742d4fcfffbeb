"""
Best-effort JSON extraction from free-text LLM replies.

Each extractor returns the parsed value or None ("no match"); none of them
raise. Arrays go through an ordered cascade and the name of the extractor
that succeeded is reported back for logging.
"""

import json
import logging
import re
from typing import Callable, Optional

logger = logging.getLogger(__name__)

FENCED_ARRAY = re.compile(r"```(?:json)?\s*(\[[\s\S]*?\])\s*```", re.IGNORECASE)
FENCED_OBJECT = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```", re.IGNORECASE)
FLAT_OBJECT = re.compile(r"\{[^{}]*\}")
TRAILING_COMMA = re.compile(r",\s*([\]}])")
FENCE_MARKERS = re.compile(r"```(?:json)?\n?", re.IGNORECASE)
MODEL_TOKENS = re.compile(r"</?s>|\[/?B_INST\]|\[/?INST\]")


def _loads_array(text: str) -> Optional[list[dict]]:
    """A usable array is a JSON list with at least one object; other items are dropped."""
    try:
        value = json.loads(text)
    except ValueError:
        return None
    if not isinstance(value, list):
        return None
    objects = [item for item in value if isinstance(item, dict)]
    return objects or None


def _loads_object(text: str) -> Optional[dict]:
    try:
        value = json.loads(text)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


# ── Array strategies ─────────────────────────────────────────────────

def array_from_fenced_block(text: str) -> Optional[list[dict]]:
    match = FENCED_ARRAY.search(text)
    return _loads_array(match.group(1)) if match else None


def array_from_bracket_slice(text: str) -> Optional[list[dict]]:
    first = text.find("[")
    last = text.rfind("]")
    if first == -1 or last <= first:
        return None
    return _loads_array(text[first:last + 1])


def array_from_object_list(text: str) -> Optional[list[dict]]:
    objects = FLAT_OBJECT.findall(text)
    if not objects:
        return None
    return _loads_array("[" + ",".join(objects) + "]")


def array_from_repaired_text(text: str) -> Optional[list[dict]]:
    repaired = strip_trailing_commas(text)
    return array_from_fenced_block(repaired) or array_from_bracket_slice(repaired)


ARRAY_STRATEGIES: list[tuple[str, Callable[[str], Optional[list[dict]]]]] = [
    ("fenced_block", array_from_fenced_block),
    ("bracket_slice", array_from_bracket_slice),
    ("object_list", array_from_object_list),
    ("trailing_comma_repair", array_from_repaired_text),
]


def extract_json_array(text: str) -> tuple[Optional[list[dict]], Optional[str]]:
    """Run the array cascade in order. Returns (items, strategy_name) or (None, None)."""
    for name, strategy in ARRAY_STRATEGIES:
        items = strategy(text)
        if items is not None:
            logger.debug("JSON array extracted via %s (%d items)", name, len(items))
            return items, name
    return None, None


# ── Object extraction ────────────────────────────────────────────────

def object_from_fenced_block(text: str) -> Optional[dict]:
    match = FENCED_OBJECT.search(text)
    return _loads_object(match.group(1)) if match else None


def object_from_brace_slice(text: str) -> Optional[dict]:
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last <= first:
        return None
    return _loads_object(text[first:last + 1])


def extract_json_object(text: str) -> Optional[dict]:
    """Code fence first, then first '{' to last '}', then the whole text."""
    text = text.strip()
    return (
        object_from_fenced_block(text)
        or object_from_brace_slice(text)
        or _loads_object(text)
    )


# ── Clean-up helpers ─────────────────────────────────────────────────

def strip_trailing_commas(text: str) -> str:
    return TRAILING_COMMA.sub(r"\1", text)


def strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = FENCE_MARKERS.sub("", text).replace("```", "")
    return text.strip()


def strip_model_tokens(text: str) -> str:
    """Drop chat-template tokens some instruct models leak (<s>, [INST], ...)."""
    return MODEL_TOKENS.sub("", text)
