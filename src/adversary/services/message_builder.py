from __future__ import annotations

"""Turn a debate request envelope into a provider message list.

Construction is deterministic: the same setup and history always produce
the same list, with the system prompt first, one synthesized instruction
message, then the caller's history in its original order.
"""

from typing import Dict, List

from ..domain.debate_models import DebateRequest, DebateSetup, SamplingParams, Turn
from ..domain.errors import DebateRequestError
from .prompts import (
    get_lens_name,
    get_quick_action_prompt,
    get_system_prompt,
    get_template_context,
    is_quick_action,
)


# Opening and follow-up turns run hotter for a more assertive critique.
SAMPLING: Dict[str, SamplingParams] = {
    "start": SamplingParams(temperature=0.8, max_tokens=1200),
    "continue": SamplingParams(temperature=0.8, max_tokens=1200),
    "quick": SamplingParams(temperature=0.7, max_tokens=2000),
}

_ROLE_MAP = {"opponent": "assistant", "user": "user"}


def _context_line(setup: DebateSetup, label: str) -> str:
    return f"{label} {setup.context}" if setup.context else ""


def build_opening_prompt(setup: DebateSetup) -> str:
    return (
        "Someone has come to you to stress-test their thinking:\n"
        "\n"
        f"**Debate Type:** {get_template_context(setup.template)}\n"
        f"**Your Lens:** {get_lens_name(setup.lens)}\n"
        "\n"
        f'**Their position:** "{setup.topic}"\n'
        "\n"
        "**Their reasoning:**\n"
        f"{setup.position}\n"
        "\n"
        f"{_context_line(setup, '**Context:**')}\n"
        "\n"
        "Give them your honest, sharp reaction THROUGH YOUR CURRENT LENS. Find the weakest point in their "
        "reasoning and go straight for it. Use your thinking arsenal — apply the most relevant stress test. "
        "Be direct, be specific, be incisive. They came to you because they want to be challenged, not coddled.\n"
        "\n"
        "Start with your sharpest observation. End with the question they need to answer."
    )


def build_scene_prompt(setup: DebateSetup) -> str:
    return (
        "We're in an active debate:\n"
        "\n"
        f'Topic: "{setup.topic}"\n'
        f"Type: {get_template_context(setup.template)}\n"
        f"Your Lens: {get_lens_name(setup.lens)}\n"
        f"Their original reasoning: {setup.position}\n"
        f"{_context_line(setup, 'Context:')}\n"
        "\n"
        "Continue challenging them through your lens. Track the evolution of their argument — acknowledge "
        "when they improve a point, but keep pushing on remaining weaknesses. Reference their earlier "
        "statements when relevant. Stay sharp, stay specific."
    )


def map_history(turns: List[Turn]) -> List[Dict[str, str]]:
    return [{"role": _ROLE_MAP[t.role], "content": t.content} for t in turns]


def validate_request(req: DebateRequest) -> None:
    """Reject envelopes that cannot be dispatched.

    Unknown lens or template values are not errors; they resolve to
    defaults when the prompt text is assembled.
    """
    if req.action == "continue" and not req.messages:
        raise DebateRequestError("No messages")
    if req.action == "quick" and not is_quick_action(req.quick_action):
        raise DebateRequestError(f"Unknown quick action: {req.quick_action or '<missing>'}")


def build_messages(req: DebateRequest) -> List[Dict[str, str]]:
    validate_request(req)
    msgs: List[Dict[str, str]] = [{"role": "system", "content": get_system_prompt(req.setup.lens)}]

    if req.action == "start":
        msgs.append({"role": "user", "content": build_opening_prompt(req.setup)})
        return msgs

    msgs.append({"role": "user", "content": build_scene_prompt(req.setup)})
    msgs.extend(map_history(req.messages))
    if req.action == "quick":
        msgs.append({"role": "user", "content": get_quick_action_prompt(req.quick_action or "")})
    return msgs


def sampling_for(req: DebateRequest) -> SamplingParams:
    base = SAMPLING[req.action]
    return SamplingParams(temperature=base.temperature, max_tokens=base.max_tokens, stream=req.stream)
