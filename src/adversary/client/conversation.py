from __future__ import annotations

"""Session-local conversation client for the debate gateway.

Holds the transcript in memory, sends the full history on every request
(the gateway keeps no state), and decodes streamed replies token by token.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

import httpx

from ..core import state_machine as sm
from ..domain.debate_models import DebateSetup, Turn
from ..services.prompts import QUICK_ACTION_LABELS, is_quick_action
from ..services.streaming import decode_stream

LOG = logging.getLogger("adversary.client")

DEFAULT_ENDPOINT = "/api/debate"


class ConversationBusy(RuntimeError):
    """A request is already in flight for this conversation."""


class ConversationNotStarted(RuntimeError):
    """submit/quick called before start()."""


class GatewayResponseError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ConversationClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        http: Optional[httpx.Client] = None,
        endpoint: str = DEFAULT_ENDPOINT,
        stream: bool = True,
        timeout: float = 120.0,
        on_update: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._owns_http = http is None
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.endpoint = endpoint
        self.stream = stream
        self.on_update = on_update
        self._lock = threading.Lock()
        self.state = sm.IDLE
        self.setup: Optional[DebateSetup] = None
        self.transcript: List[Turn] = []
        self.error: Optional[str] = None
        self.partial = ""

    @property
    def is_loading(self) -> bool:
        return self.state == sm.AWAITING_RESPONSE

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "ConversationClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def start(self, setup: DebateSetup, cancel: Optional[threading.Event] = None) -> Optional[Turn]:
        """Open a debate; the opening critique becomes the first Turn."""
        with self._exclusive():
            self.setup = setup
            self.transcript = []
            return self._exchange("start", setup, history=[], cancel=cancel)

    def submit(self, text: str, cancel: Optional[threading.Event] = None) -> Optional[Turn]:
        with self._exclusive():
            setup = self._require_setup()
            self.transcript.append(Turn(role="user", content=text))
            return self._exchange("continue", setup, history=list(self.transcript), cancel=cancel)

    def quick(self, action: str, cancel: Optional[threading.Event] = None) -> Optional[Turn]:
        """Run a canned follow-up such as ``rate`` or ``steelman``.

        The visible user Turn carries the action label; the request sends
        the history before it, since the gateway appends the full
        instruction itself.
        """
        if not is_quick_action(action):
            raise ValueError(f"Unknown quick action: {action}")
        with self._exclusive():
            setup = self._require_setup()
            history = list(self.transcript)
            self.transcript.append(Turn(role="user", content=QUICK_ACTION_LABELS[action]))
            return self._exchange("quick", setup, history=history, quick_action=action, cancel=cancel)

    def reset(self) -> None:
        with self._exclusive():
            self.transcript = []
            self.setup = None
            self.error = None
            self.partial = ""
            self._transition(sm.IDLE)

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------
    def _require_setup(self) -> DebateSetup:
        if self.setup is None:
            raise ConversationNotStarted("Call start() before continuing the debate")
        return self.setup

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        # Overlapping submissions would interleave tokens in the accumulator.
        if not self._lock.acquire(blocking=False):
            raise ConversationBusy("A response is still streaming")
        try:
            if not sm.can_submit(self.state):
                raise ConversationBusy(f"Cannot proceed while {self.state}")
            yield
        finally:
            self._lock.release()

    def _transition(self, target: str) -> None:
        if not sm.is_valid_transition(self.state, target):
            raise RuntimeError(f"Invalid conversation transition {self.state} -> {target}")
        self.state = target

    def _payload(self, action: str, setup: DebateSetup, history: List[Turn], quick_action: Optional[str]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "action": action,
            "setup": setup.model_dump(),
            "messages": [t.model_dump() for t in history],
            "stream": self.stream,
        }
        if quick_action:
            payload["quickAction"] = quick_action
        return payload

    def _exchange(
        self,
        action: str,
        setup: DebateSetup,
        *,
        history: List[Turn],
        quick_action: Optional[str] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Optional[Turn]:
        self._transition(sm.AWAITING_RESPONSE)
        self.error = None
        self.partial = ""
        payload = self._payload(action, setup, history, quick_action)
        try:
            if self.stream:
                text = self._read_stream(payload, cancel)
            else:
                text = self._read_json(payload)
        except (httpx.HTTPError, GatewayResponseError) as exc:
            message = exc.message if isinstance(exc, GatewayResponseError) else "Failed to reach the debate service"
            LOG.warning("debate_turn_failed", extra={"action": action, "err": str(exc)})
            self.error = message
            self.partial = ""
            self._transition(sm.IDLE_WITH_ERROR)
            return None
        except Exception:
            self.error = "Unexpected client error"
            self.partial = ""
            self._transition(sm.IDLE_WITH_ERROR)
            raise

        self.partial = ""
        if text is None:
            # Cancelled: nothing is appended and no error is shown.
            self._transition(sm.IDLE)
            return None
        turn = Turn(role="opponent", content=text)
        self.transcript.append(turn)
        self._transition(sm.IDLE)
        return turn

    def _push_partial(self, text: str) -> None:
        self.partial = text
        if self.on_update is not None:
            self.on_update(text)

    def _read_stream(self, payload: Dict[str, Any], cancel: Optional[threading.Event]) -> Optional[str]:
        with self._http.stream("POST", self.endpoint, json=payload) as resp:
            if resp.status_code != 200:
                resp.read()
                raise GatewayResponseError(_error_message(resp), resp.status_code)
            result = decode_stream(resp.iter_text(), on_update=self._push_partial, cancel=cancel)
        if result.cancelled:
            return None
        if not result.completed:
            raise GatewayResponseError("The response ended before it was complete")
        return result.text

    def _read_json(self, payload: Dict[str, Any]) -> str:
        resp = self._http.post(self.endpoint, json=payload)
        if resp.status_code != 200:
            raise GatewayResponseError(_error_message(resp), resp.status_code)
        try:
            body = resp.json()
        except ValueError:
            body = None
        text = body.get("response") if isinstance(body, dict) else None
        if not isinstance(text, str):
            raise GatewayResponseError("Malformed response from the debate service", resp.status_code)
        return text


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return f"Request failed with status {resp.status_code}"
