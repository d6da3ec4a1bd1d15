from __future__ import annotations

from datetime import UTC, datetime
from dotenv import load_dotenv
import logging
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

from .routers.debate import router as debate_router, error_response, GENERIC_ERROR
from .routers.diag import router as diag_router
from ..core.env import env_list
from ..observability.metrics import metrics_middleware_factory

load_dotenv()  # Load environment variables from .env if present (OPENAI_API_KEY, XAI_API_KEY, etc.)

LOG = logging.getLogger("adversary.api")

app = FastAPI(title="Adversary Debate Gateway", version="0.1.0")

# Observability: request latency histogram
app.middleware("http")(metrics_middleware_factory())

# Routers
app.include_router(debate_router)
app.include_router(diag_router)

# Also expose the same routers under /api, the path the browser client calls
app.include_router(debate_router, prefix="/api")
app.include_router(diag_router, prefix="/api")

# CORS (for the Next.js dev server on localhost:3000 by default)
app.add_middleware(
    CORSMiddleware,
    allow_origins=env_list("ADVERSARY_CORS_ORIGINS", ["http://localhost:3000", "http://127.0.0.1:3000"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))
    else:
        message = "Invalid request"
    return error_response(400, message)


@app.exception_handler(Exception)
async def _unhandled_error(request: Request, exc: Exception):
    LOG.exception("unhandled_error", extra={"path": request.url.path})
    return error_response(500, GENERIC_ERROR)


def _service_info():
    return {"name": "Adversary Debate Gateway", "version": "0.1.0"}


def _health():
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        "components": {
            "api": "ok",
            "state": "stateless",
        },
    }


@app.get("/")
def root():
    return _service_info()


@app.get("/health")
def health():
    return _health()


@app.get("/metrics")
def metrics() -> Response:
    # Expose Prometheus metrics
    data = generate_latest(REGISTRY)
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


# API-prefixed convenience routes (kept alongside non-prefixed routes)
@app.get("/api")
def api_root():
    return _service_info()


@app.get("/api/health")
def api_health():
    return _health()


@app.get("/api/metrics")
def api_metrics() -> Response:
    data = generate_latest(REGISTRY)
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
