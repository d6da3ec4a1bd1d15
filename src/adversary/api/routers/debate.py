from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse

from ...domain.debate_models import DebateRequest, DebateResponse, ErrorBody
from ...domain.errors import DebateRequestError
from ...observability.metrics import record_debate
from ...security.rate_limit import RateLimitExceeded, limit_debate_turn
from ...services import completion
from ...services.message_builder import build_messages, sampling_for
from ...services.prompts import resolve_lens
from ...services.streaming import EMPTY_RESPONSE_PLACEHOLDER, SSE_HEADERS, relay_frames

logger = logging.getLogger(__name__)
LOG = logging.getLogger("adversary.gateway")

# Provider detail stays in the server log; clients only ever see this.
GENERIC_ERROR = "Failed to generate response"

router = APIRouter(tags=["debate"])


def error_response(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(ErrorBody(error=message).model_dump(), status_code=status_code, headers=headers)


def _client_id(request: Request) -> str:
    return request.client.host if request.client else "anonymous"


@router.post(
    "/debate",
    response_model=DebateResponse,
    responses={
        200: {"content": {"text/event-stream": {}}},
        400: {"model": ErrorBody},
        429: {"model": ErrorBody},
        500: {"model": ErrorBody},
    },
)
async def debate(req: DebateRequest, request: Request):
    mode = "stream" if req.stream else "json"

    try:
        limit_debate_turn(_client_id(request))
    except RateLimitExceeded as exc:
        record_debate(req.action, mode, "rate_limited")
        return error_response(429, "Too many requests", headers={"Retry-After": str(exc.retry_after_seconds)})

    try:
        messages = build_messages(req)
    except DebateRequestError as exc:
        record_debate(req.action, mode, "rejected")
        return error_response(400, exc.message)

    params = sampling_for(req)
    LOG.info(
        "debate_request",
        extra={
            "action": req.action,
            "mode": mode,
            "history": len(req.messages),
            "lens": resolve_lens(req.setup.lens),
            "quick_action": req.quick_action,
        },
    )

    try:
        provider = completion.get_completion_provider()
        if not params.stream:
            text = await provider.complete(messages, params)
            record_debate(req.action, mode, "ok")
            return DebateResponse(response=text if text and text.strip() else EMPTY_RESPONSE_PLACEHOLDER)

        # Pull the first token here so dispatch failures still get a JSON error.
        tokens = provider.stream(messages, params)
        try:
            first: Optional[str] = await anext(tokens)
        except StopAsyncIteration:
            first = None
    except Exception as exc:
        LOG.warning("llm_dispatch_failed", extra={"action": req.action, "mode": mode, "err": str(exc)})
        logger.exception("Debate completion failed")
        record_debate(req.action, mode, "failed")
        return error_response(500, GENERIC_ERROR)

    record_debate(req.action, mode, "ok")
    return StreamingResponse(
        relay_frames(first, tokens),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
