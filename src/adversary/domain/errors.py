from __future__ import annotations


class DebateRequestError(ValueError):
    """Request is well-formed JSON but cannot be turned into a provider call."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CompletionError(RuntimeError):
    """Provider dispatch failed (network, auth, rate limit, bad payload)."""
