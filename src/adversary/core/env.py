from __future__ import annotations

"""Typed readers for environment-driven settings.

Invalid or missing values fall back to the supplied default instead of
raising, so a typo in a deployment variable never takes the service down.
"""

import os
from typing import List


_TRUTHY = {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    if not name:
        return default
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
        return value if value > 0 else default
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
        return value if value > 0 else default
    except ValueError:
        return default


def env_flag(name: str) -> bool:
    flag = os.getenv(name)
    return bool(flag and flag.strip().lower() in _TRUTHY)


def env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    values = [v.strip() for v in raw.split(",")]
    return [v for v in values if v] or list(default)
