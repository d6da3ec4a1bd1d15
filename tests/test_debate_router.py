import json

from fastapi.testclient import TestClient

from src.adversary.api.main import app
from src.adversary.services import completion
from src.adversary.services.prompts import QUICK_ACTION_PROMPTS, get_system_prompt
from src.adversary.services.streaming import EMPTY_RESPONSE_PLACEHOLDER

from .utils import debate_body, turns


client = TestClient(app)


def _frames(body: str):
    return [block for block in body.split("\n\n") if block]


def _contents(body: str):
    out = []
    for frame in _frames(body):
        data = frame[len("data: "):]
        if data != "[DONE]":
            out.append(json.loads(data)["content"])
    return out


def test_start_streams_tokens_then_done(fake_provider):
    r = client.post("/api/debate", json=debate_body("start"))
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/event-stream")
    assert r.headers["cache-control"] == "no-cache"
    assert r.headers["connection"] == "keep-alive"
    frames = _frames(r.text)
    assert frames[-1] == "data: [DONE]"
    assert "".join(_contents(r.text)) == "Your moat is imaginary."

    call = fake_provider.calls[0]
    assert [m["role"] for m in call["messages"]] == ["system", "user"]
    assert call["params"].temperature == 0.8
    assert call["params"].max_tokens == 1200


def test_unprefixed_route_is_equivalent(fake_provider):
    r = client.post("/debate", json=debate_body("start", stream=False))
    assert r.status_code == 200
    assert r.json() == {"response": "Your moat is imaginary."}


def test_non_streaming_returns_json(fake_provider):
    r = client.post("/api/debate", json=debate_body("continue", messages=turns("open", "reply"), stream=False))
    assert r.status_code == 200
    assert r.json()["response"] == "Your moat is imaginary."
    assert len(fake_provider.calls[0]["messages"]) == 4
    assert fake_provider.calls[0]["params"].stream is False


def test_empty_completion_uses_placeholder(fake_provider):
    fake_provider.tokens = []
    r = client.post("/api/debate", json=debate_body("start", stream=False))
    assert r.json()["response"] == EMPTY_RESPONSE_PLACEHOLDER

    r = client.post("/api/debate", json=debate_body("start"))
    assert _contents(r.text) == [EMPTY_RESPONSE_PLACEHOLDER]
    assert _frames(r.text)[-1] == "data: [DONE]"


def test_quick_rate_on_three_turns_sends_six_messages(fake_provider):
    history = turns("opening salvo", "my defence", "counterpoint")
    r = client.post("/api/debate", json=debate_body("quick", messages=history, quick="rate"))
    assert r.status_code == 200
    msgs = fake_provider.calls[0]["messages"]
    assert len(msgs) == 6
    assert msgs[0] == {"role": "system", "content": get_system_prompt("customer")}
    assert [m["role"] for m in msgs[2:5]] == ["assistant", "user", "assistant"]
    assert msgs[-1]["content"] == QUICK_ACTION_PROMPTS["rate"]
    params = fake_provider.calls[0]["params"]
    assert (params.temperature, params.max_tokens) == (0.7, 2000)


def test_unknown_quick_action_rejected_before_dispatch(fake_provider):
    r = client.post("/api/debate", json=debate_body("quick", messages=turns("x"), quick="roast"))
    assert r.status_code == 400
    assert "roast" in r.json()["error"]
    assert fake_provider.calls == []


def test_continue_without_history_rejected(fake_provider):
    r = client.post("/api/debate", json=debate_body("continue", messages=[]))
    assert r.status_code == 400
    assert r.json() == {"error": "No messages"}
    assert fake_provider.calls == []


def test_missing_setup_fields_rejected(fake_provider):
    body = debate_body("start")
    del body["setup"]["topic"]
    r = client.post("/api/debate", json=body)
    assert r.status_code == 400
    assert "topic" in r.json()["error"]

    body = debate_body("start", position="")
    r = client.post("/api/debate", json=body)
    assert r.status_code == 400
    assert fake_provider.calls == []


def test_unknown_action_rejected(fake_provider):
    r = client.post("/api/debate", json=debate_body("argue"))
    assert r.status_code == 400
    assert "error" in r.json()


def test_unknown_lens_is_not_an_error(fake_provider):
    r = client.post("/api/debate", json=debate_body("start", lens="oracle", template="???", stream=False))
    assert r.status_code == 200
    assert fake_provider.calls[0]["messages"][0]["content"] == get_system_prompt(None)


def test_provider_failure_before_first_token_is_opaque_500(fake_provider):
    fake_provider.fail_after = 0
    r = client.post("/api/debate", json=debate_body("start"))
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to generate response"}

    r = client.post("/api/debate", json=debate_body("start", stream=False))
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to generate response"}


def test_unconfigured_provider_is_opaque_500(monkeypatch):
    def _no_provider(*_a, **_k):
        raise RuntimeError("No active model provider available for this task.")

    monkeypatch.setattr(completion, "get_completion_provider", _no_provider)
    r = client.post("/api/debate", json=debate_body("start"))
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to generate response"}


def test_mid_stream_failure_ends_without_done(fake_provider):
    fake_provider.fail_after = 2
    r = client.post("/api/debate", json=debate_body("start"))
    assert r.status_code == 200
    assert _contents(r.text) == ["Your ", "moat "]
    assert "data: [DONE]" not in r.text


def test_repeated_start_is_well_formed(fake_provider):
    for _ in range(2):
        r = client.post("/api/debate", json=debate_body("start"))
        assert r.status_code == 200
        assert _frames(r.text)[-1] == "data: [DONE]"
    assert len(fake_provider.calls) == 2
    assert fake_provider.calls[0]["messages"] == fake_provider.calls[1]["messages"]


def test_null_context_and_messages_are_treated_as_absent(fake_provider):
    body = debate_body("start", context=None, stream=False)
    body["messages"] = None
    r = client.post("/api/debate", json=body)
    assert r.status_code == 200
    opening = fake_provider.calls[0]["messages"][1]["content"]
    assert "**Context:**" not in opening
    assert "None" not in opening


def test_non_string_lens_and_template_fall_back_to_defaults(fake_provider):
    r = client.post("/api/debate", json=debate_body("start", lens=7, template=3, stream=False))
    assert r.status_code == 200
    msgs = fake_provider.calls[0]["messages"]
    assert msgs[0]["content"] == get_system_prompt(None)
    assert "General debate" in msgs[1]["content"]
