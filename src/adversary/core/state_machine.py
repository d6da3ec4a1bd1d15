from __future__ import annotations

from typing import Dict, List

IDLE = "idle"
AWAITING_RESPONSE = "awaiting-response"
IDLE_WITH_ERROR = "idle-with-error"

# Conversation client transitions; no exit from awaiting-response except
# completion or failure (cancellation resolves to idle).
CLIENT_TRANSITIONS: Dict[str, List[str]] = {
    IDLE: [AWAITING_RESPONSE, IDLE],
    AWAITING_RESPONSE: [IDLE, IDLE_WITH_ERROR],
    IDLE_WITH_ERROR: [AWAITING_RESPONSE, IDLE],
}


def is_valid_transition(current: str, target: str) -> bool:
    return target in CLIENT_TRANSITIONS.get(current, [])


def can_submit(current: str) -> bool:
    return is_valid_transition(current, AWAITING_RESPONSE)
