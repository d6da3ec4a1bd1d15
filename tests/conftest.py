import sys
from pathlib import Path
from typing import Iterable, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)


class FakeProvider:
    """Deterministic stand-in for the completion provider."""

    name = "fake"
    model = "fake-model"

    def __init__(self, tokens: Iterable[str] = ("Your ", "moat ", "is ", "imaginary.")) -> None:
        self.tokens: List[str] = list(tokens)
        self.calls: List[dict] = []
        self.fail_after: Optional[int] = None

    async def complete(self, messages, params):
        self.calls.append({"messages": messages, "params": params})
        if self.fail_after == 0:
            raise RuntimeError("provider exploded")
        return "".join(self.tokens)

    async def stream(self, messages, params):
        self.calls.append({"messages": messages, "params": params})
        for idx, token in enumerate(self.tokens):
            if self.fail_after is not None and idx >= self.fail_after:
                raise RuntimeError("provider dropped the connection")
            yield token


@pytest.fixture(autouse=True)
def fake_provider(monkeypatch):
    """Route every debate turn to the fake provider unless a test overrides it."""
    from src.adversary.services import completion
    from src.adversary.security.rate_limit import reset_rate_limits

    provider = FakeProvider()
    monkeypatch.setattr(completion, "get_completion_provider", lambda *_a, **_k: provider)
    reset_rate_limits()
    return provider
