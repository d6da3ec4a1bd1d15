from __future__ import annotations

from typing import Any, AsyncIterator, Dict, Iterator, List, Mapping, Optional, Protocol
import logging

import requests
from requests.adapters import HTTPAdapter
from starlette.concurrency import run_in_threadpool
from urllib3.util.retry import Retry

from ..core.env import env_float
from ..domain.debate_models import SamplingParams
from ..domain.errors import CompletionError
from .model_router import ModelRouter, ProviderSelection
from .streaming import iter_as_async, parse_data_line

# Optional import: langchain-openai
try:
    from langchain_openai import ChatOpenAI  # type: ignore
except Exception:  # pragma: no cover - optional import
    ChatOpenAI = None  # type: ignore


logger = logging.getLogger(__name__)
LOG = logging.getLogger("adversary.llm")

_TIMEOUT = (
    env_float("ADVERSARY_LLM_CONNECT_TIMEOUT", 5.0),
    env_float("ADVERSARY_LLM_READ_TIMEOUT", 90.0),
)

Messages = List[Dict[str, str]]


class CompletionProvider(Protocol):
    """Narrow contract the gateway depends on."""

    name: str
    model: str

    async def complete(self, messages: Messages, params: SamplingParams) -> str: ...

    def stream(self, messages: Messages, params: SamplingParams) -> AsyncIterator[str]: ...


def _build_session() -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=2,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset(["POST", "GET"]),
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class ChatOpenAIProvider:
    """Hosted OpenAI-compatible provider driven through langchain-openai."""

    def __init__(self, name: str, model: str, api_key: Optional[str], base_url: Optional[str]) -> None:
        self.name = name
        self.model = model
        self._api_key = api_key
        self._base_url = base_url

    def _llm(self, params: SamplingParams):
        if ChatOpenAI is None:
            raise CompletionError("LLM client not available")
        return ChatOpenAI(
            api_key=self._api_key,
            base_url=self._base_url,
            model=self.model,
            temperature=params.temperature,
            max_tokens=params.max_tokens,
            streaming=params.stream,
            timeout=_TIMEOUT[1],
            max_retries=0,
        )

    async def complete(self, messages: Messages, params: SamplingParams) -> str:
        LOG.debug("llm_invoke", extra={"provider": self.name, "model": self.model})
        try:
            res = await self._llm(params).ainvoke(messages)
        except CompletionError:
            raise
        except Exception as exc:
            raise CompletionError(str(exc)) from exc
        text = res.content if hasattr(res, "content") else str(res)
        return text if isinstance(text, str) else ""

    async def stream(self, messages: Messages, params: SamplingParams) -> AsyncIterator[str]:
        LOG.debug("llm_stream", extra={"provider": self.name, "model": self.model})
        try:
            async for chunk in self._llm(params).astream(messages):
                content = getattr(chunk, "content", "")
                if isinstance(content, str) and content:
                    yield content
        except CompletionError:
            raise
        except Exception as exc:
            raise CompletionError(str(exc)) from exc


class LocalLLMClient:
    """OpenAI-compatible local host (Ollama, vLLM, llama.cpp server)."""

    name = "local"

    def __init__(self, base_url: str, model: str, api_key: Optional[str] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._api_key = api_key
        self._timeout = _TIMEOUT
        self._session = _build_session()

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}

    def _payload(self, messages: Messages, params: SamplingParams, stream: bool) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": messages,
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
            "stream": stream,
        }

    def invoke(self, messages: Messages, params: SamplingParams) -> str:
        LOG.debug("local_llm_invoke", extra={"model": self.model, "base_url": self.base_url})
        resp = self._session.post(
            f"{self.base_url}/v1/chat/completions",
            json=self._payload(messages, params, stream=False),
            headers=self._headers(),
            timeout=self._timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        choices = data.get("choices") or []
        if choices:
            message = choices[0].get("message") or {}
            content = message.get("content")
            if content:
                return content
        return ""

    def iter_tokens(self, messages: Messages, params: SamplingParams) -> Iterator[str]:
        LOG.debug("local_llm_stream", extra={"model": self.model, "base_url": self.base_url})
        with self._session.post(
            f"{self.base_url}/v1/chat/completions",
            json=self._payload(messages, params, stream=True),
            headers=self._headers(),
            timeout=self._timeout,
            stream=True,
        ) as resp:
            resp.raise_for_status()
            for raw_line in resp.iter_lines():
                if not raw_line:
                    continue
                line = raw_line.decode("utf-8") if isinstance(raw_line, bytes) else raw_line
                parsed = parse_data_line(line)
                if parsed is None:
                    continue
                if parsed.done:
                    break
                if not isinstance(parsed.payload, dict):
                    continue
                delta = (parsed.payload.get("choices") or [{}])[0].get("delta") or {}
                token = delta.get("content") or ""
                if token:
                    yield token

    async def complete(self, messages: Messages, params: SamplingParams) -> str:
        try:
            return await run_in_threadpool(self.invoke, messages, params)
        except requests.exceptions.RequestException as exc:
            raise CompletionError(str(exc)) from exc

    async def stream(self, messages: Messages, params: SamplingParams) -> AsyncIterator[str]:
        try:
            async for token in iter_as_async(self.iter_tokens(messages, params)):
                yield token
        except requests.exceptions.RequestException as exc:
            raise CompletionError(str(exc)) from exc


def build_provider(selection: ProviderSelection, env: Optional[Mapping[str, str]] = None) -> CompletionProvider:
    base_url = selection.base_url(env)
    api_key = selection.api_key(env)

    if selection.name == "local":
        logger.info("Using local LLM provider base_url=%s model=%s", base_url, selection.model)
        return LocalLLMClient(base_url=base_url or "http://127.0.0.1:11434", model=selection.model, api_key=api_key)

    if not ChatOpenAI:
        raise RuntimeError("LLM client not available")
    if selection.requires_api_key and not api_key:
        raise RuntimeError("LLM not configured")

    logger.info(
        "Using remote LLM provider name=%s model=%s base_url=%s",
        selection.name,
        selection.model,
        base_url,
    )
    return ChatOpenAIProvider(name=selection.name, model=selection.model, api_key=api_key, base_url=base_url)


def get_completion_provider(router: Optional[ModelRouter] = None) -> CompletionProvider:
    """Resolve the provider for a debate turn.

    Raises ``RuntimeError`` when nothing is configured; the gateway reports
    that as a generic dispatch failure.
    """
    router = router or ModelRouter()
    return build_provider(router.select_provider("debate"), router.env)
