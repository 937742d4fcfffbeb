"""
Guardrails — input validation for free-text fields sent to the LLM.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 10000

INJECTION_PATTERNS = [
    r"ignore\s+(all\s+)?previous\s+instructions",
    r"ignore\s+(all\s+)?above",
    r"disregard\s+(all\s+)?previous",
    r"you\s+are\s+now\s+(?:a|an)\s+",
    r"<\s*system\s*>",
]


@dataclass
class GuardrailResult:
    """Result of a guardrail check."""
    allowed: bool
    reason: Optional[str] = None


def check_input(message: str, user_id: str = "", max_length: int = MAX_MESSAGE_LENGTH) -> GuardrailResult:
    """
    Validate user input before processing.
    Returns GuardrailResult with allowed=False if blocked.
    """
    if not message.strip():
        return GuardrailResult(allowed=False, reason="Message is empty.")

    if len(message) > max_length:
        return GuardrailResult(
            allowed=False,
            reason=f"Message too long ({len(message)} chars). Maximum is {max_length}.",
        )

    # Logged only; the system prompt is the real defence.
    msg_lower = message.lower()
    for pattern in INJECTION_PATTERNS:
        if re.search(pattern, msg_lower):
            logger.warning("Potential injection detected from user=%s: %s", user_id, message[:100])
            break

    return GuardrailResult(allowed=True)
