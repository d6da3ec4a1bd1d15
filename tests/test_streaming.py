import asyncio
import json
import threading

from src.adversary.services import streaming as st


def _collect(agen):
    async def run():
        return [frame async for frame in agen]

    return asyncio.run(run())


async def _tokens(*values, fail=False):
    for v in values:
        yield v
    if fail:
        raise RuntimeError("boom")


def test_sse_frame_shape():
    frame = st.sse_frame('say "hi"\n')
    assert frame.startswith("data: ") and frame.endswith("\n\n")
    assert json.loads(frame[len("data: "):]) == {"content": 'say "hi"\n'}
    assert st.DONE_FRAME == "data: [DONE]\n\n"


def test_relay_frames_wraps_tokens_and_terminates():
    frames = _collect(st.relay_frames("A", _tokens("", "B")))
    assert frames == [st.sse_frame("A"), st.sse_frame("B"), st.DONE_FRAME]


def test_relay_frames_substitutes_placeholder_for_empty_stream():
    frames = _collect(st.relay_frames(None, _tokens()))
    assert frames == [st.sse_frame(st.EMPTY_RESPONSE_PLACEHOLDER), st.DONE_FRAME]


def test_relay_frames_ends_without_done_on_failure():
    frames = _collect(st.relay_frames("A", _tokens("B", fail=True)))
    assert frames == [st.sse_frame("A"), st.sse_frame("B")]


def test_decode_two_frames_then_done():
    chunks = ['data: {"content":"A"}\n\n', 'data: {"content":"B"}\n\n', "data: [DONE]\n\n"]
    result = st.decode_stream(chunks)
    assert result.text == "AB"
    assert result.completed


def test_decode_skips_malformed_frame():
    chunks = ['data: {"content":"A"}\n\ndata: {not json\n\ndata: {"content":"B"}\n\ndata: [DONE]\n\n']
    result = st.decode_stream(chunks)
    assert result.text == "AB"
    assert result.completed
    assert result.skipped == 1


def test_decode_reassembles_lines_split_across_chunks():
    wire = 'data: {"content":"Hel"}\n\ndata: {"content":"lo"}\n\ndata: [DONE]\n\n'
    chunks = [wire[i:i + 7] for i in range(0, len(wire), 7)]
    assert st.decode_stream(chunks).text == "Hello"


def test_decode_handles_multibyte_split_in_bytes():
    wire = ('data: ' + json.dumps({"content": "café"}, ensure_ascii=False) + "\n\ndata: [DONE]\n\n").encode("utf-8")
    cut = wire.index("é".encode("utf-8")) + 1
    result = st.decode_stream([wire[:cut], wire[cut:]])
    assert result.text == "café"
    assert result.completed


def test_decode_ignores_non_data_lines_and_frames_after_done():
    chunks = [
        ": keep-alive\n",
        "event: status\n",
        'data: {"other": 1}\n',
        'data: {"content":"X"}\n',
        "data: [DONE]\n",
        'data: {"content":"late"}\n',
    ]
    result = st.decode_stream(chunks)
    assert result.text == "X"
    assert result.completed


def test_decode_without_done_is_incomplete():
    result = st.decode_stream(['data: {"content":"half"}\n\n', 'data: {"content":" a reply"}'])
    assert result.text == "half a reply"
    assert not result.completed


def test_decode_reports_every_partial_update():
    seen = []
    chunks = ['data: {"content":"A"}\ndata: {"content":"B"}\n', "data: [DONE]\n"]
    st.decode_stream(chunks, on_update=seen.append)
    assert seen == ["A", "AB"]


def test_decode_cancellation_discards_partial_text():
    cancel = threading.Event()

    def on_update(_text):
        cancel.set()

    chunks = ['data: {"content":"A"}\n\n', 'data: {"content":"B"}\n\n', "data: [DONE]\n\n"]
    result = st.decode_stream(chunks, on_update=on_update, cancel=cancel)
    assert result.cancelled
    assert result.text == ""
    assert not result.completed


def test_parse_data_line():
    assert st.parse_data_line("data: [DONE]") == st.DataLine(done=True)
    assert st.parse_data_line('data: {"a": 1}').payload == {"a": 1}
    assert st.parse_data_line("data: {oops") is None
    assert st.parse_data_line("id: 4") is None
