from __future__ import annotations

from typing import Any, Dict, List, Optional


def setup_payload(**overrides: Any) -> Dict[str, Any]:
    setup = {
        "topic": "Launch a subscription tier for our note-taking app",
        "position": "Power users already ask for sync and will pay $8/month.",
        "context": "",
        "template": "idea",
        "lens": "customer",
    }
    setup.update(overrides)
    return setup


def turns(*pairs: str) -> List[Dict[str, str]]:
    """Alternate user/opponent turns starting with the opponent's opening."""
    out: List[Dict[str, str]] = []
    for idx, content in enumerate(pairs):
        role = "opponent" if idx % 2 == 0 else "user"
        out.append({"id": f"t{idx}", "role": role, "content": content})
    return out


def debate_body(action: str, *, messages: Optional[List[Dict[str, str]]] = None, quick: Optional[str] = None, stream: bool = True, **setup: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"action": action, "setup": setup_payload(**setup), "stream": stream}
    if messages is not None:
        body["messages"] = messages
    if quick is not None:
        body["quickAction"] = quick
    return body
