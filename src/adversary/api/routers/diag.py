from __future__ import annotations

from fastapi import APIRouter

from ...services import completion
from ...services.model_router import ModelRouter

router = APIRouter(prefix="/diag", tags=["diagnostics"])


@router.get("/llm")
async def diag_llm():
    """Report which provider a debate turn would use, without secrets."""
    library_present = completion.ChatOpenAI is not None
    model_router = ModelRouter()
    if model_router.maybe_select_provider("debate") is None:
        return {
            "provider": "none",
            "has_api_key": False,
            "base_url": None,
            "model": None,
            "library_present": library_present,
            "ready": False,
        }
    meta = model_router.generate_metadata("debate")
    # The local provider does not go through langchain-openai.
    ready = meta["has_api_key"] and (library_present or meta["provider"] == "local")
    return {
        "provider": meta["provider"],
        "has_api_key": meta["has_api_key"],
        "base_url": meta["base_url"],
        "model": meta["model"],
        "library_present": library_present,
        "ready": ready,
    }
