"""Routing helpers for selecting the completion provider.

The router does not couple directly to concrete SDK clients; it picks a
provider configuration that :mod:`.completion` turns into a client. This
keeps the selection policy unit-testable without importing the LLM SDKs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Set


@dataclass(frozen=True)
class ProviderSelection:
    """Returned details about the provider that should handle a debate turn."""

    name: str
    model: str
    api_key_env: Optional[str]
    base_url_env: Optional[str] = None
    default_base_url: Optional[str] = None
    requires_api_key: bool = True

    def base_url(self, env: Optional[Mapping[str, str]] = None) -> Optional[str]:
        env = env if env is not None else os.environ
        if self.base_url_env and env.get(self.base_url_env):
            return env[self.base_url_env]
        return self.default_base_url

    def api_key(self, env: Optional[Mapping[str, str]] = None) -> Optional[str]:
        env = env if env is not None else os.environ
        return env.get(self.api_key_env) if self.api_key_env else None


class ModelRouter:
    """Policy-based router over the OpenAI-compatible providers we support."""

    PROVIDER_CONFIG: Dict[str, Dict[str, Optional[str] | bool]] = {
        "openai": {
            "api_key_env": "OPENAI_API_KEY",
            "base_url_env": "OPENAI_BASE_URL",
            "model_env": "OPENAI_MODEL",
            "default_model": "gpt-4o",
            "default_base_url": "https://api.openai.com/v1",
        },
        "xai": {
            "api_key_env": "XAI_API_KEY",
            "base_url_env": "XAI_BASE_URL",
            "model_env": "XAI_MODEL",
            "default_model": "grok-2-latest",
            "default_base_url": "https://api.x.ai/v1",
        },
        "local": {
            "api_key_env": "LOCAL_API_KEY",
            "base_url_env": "LOCAL_BASE_URL",
            "model_env": "LOCAL_MODEL",
            "default_model": "llama3.1:8b",
            "default_base_url": "http://127.0.0.1:11434",
            "requires_api_key": False,
        },
    }

    ROUTING_POLICY: Dict[str, tuple[str, ...]] = {
        # Critique quality matters more than cost; hosted models first.
        "debate": ("openai", "xai", "local"),
    }

    def __init__(
        self,
        env: Optional[Dict[str, str]] = None,
        allowed_providers: Optional[Iterable[str]] = None,
    ) -> None:
        self._env = env if env is not None else os.environ
        self._allowed: Optional[Set[str]] = set(allowed_providers) if allowed_providers else None
        preferred = (self._env.get("ADVERSARY_MODEL_PROVIDER") or "").strip().lower()
        self._preferred_provider = preferred if preferred else None

    @property
    def env(self) -> Mapping[str, str]:
        return self._env

    # ------------------------------------------------------------------
    # Provider resolution helpers
    # ------------------------------------------------------------------
    def provider_available(self, provider: str) -> bool:
        cfg = self.PROVIDER_CONFIG.get(provider)
        if not cfg:
            return False
        if self._allowed is not None and provider not in self._allowed:
            return False
        if bool(cfg.get("requires_api_key", True)):
            api_key_env = cfg.get("api_key_env")
            return bool(api_key_env and self._env.get(str(api_key_env)))

        # Keyless providers must be switched on explicitly and point somewhere.
        enabled_flag = (self._env.get("ADVERSARY_ENABLE_LOCAL_PROVIDER") or "").strip() == "1"
        if not enabled_flag:
            return False
        base_url_env = cfg.get("base_url_env")
        return bool(cfg.get("default_base_url") or (base_url_env and self._env.get(str(base_url_env))))

    def resolve_selection(self, provider: str) -> ProviderSelection:
        cfg = self.PROVIDER_CONFIG[provider]
        model_env = cfg.get("model_env") or ""
        model = self._env.get(str(model_env)) or str(cfg.get("default_model") or "")
        return ProviderSelection(
            name=provider,
            model=model,
            api_key_env=cfg.get("api_key_env"),  # type: ignore[arg-type]
            base_url_env=cfg.get("base_url_env"),  # type: ignore[arg-type]
            default_base_url=cfg.get("default_base_url"),  # type: ignore[arg-type]
            requires_api_key=bool(cfg.get("requires_api_key", True)),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def select_provider(self, purpose: str = "debate") -> ProviderSelection:
        """Return the provider selected for the supplied purpose.

        Raises
        ------
        RuntimeError
            If no providers configured for the requested purpose are
            currently available.
        """

        priority = list(self.ROUTING_POLICY.get(purpose, self.ROUTING_POLICY["debate"]))
        if self._preferred_provider and self._preferred_provider in self.PROVIDER_CONFIG:
            priority = [self._preferred_provider] + [p for p in priority if p != self._preferred_provider]
        for provider in priority:
            if self.provider_available(provider):
                return self.resolve_selection(provider)
        raise RuntimeError("No active model provider available for this task.")

    def maybe_select_provider(self, purpose: str = "debate") -> Optional[ProviderSelection]:
        """Like :meth:`select_provider` but returns ``None`` on failure."""

        try:
            return self.select_provider(purpose)
        except RuntimeError:
            return None

    def generate_metadata(self, purpose: str = "debate") -> Dict[str, Any]:
        """Describe the chosen provider without exposing API keys."""

        selection = self.select_provider(purpose)
        return {
            "provider": selection.name,
            "model": selection.model,
            "api_key_env": selection.api_key_env,
            "has_api_key": bool(selection.api_key(self._env)) or not selection.requires_api_key,
            "base_url": selection.base_url(self._env),
        }
