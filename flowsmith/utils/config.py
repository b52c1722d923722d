# utils/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the integration side (receiver, rate limiting)."""

    n8n_webhook_base: Optional[str] = None
    rate_limit: int = 10
    rate_window_sec: float = 60.0
    forward_timeout_sec: float = 5.0

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        base = (env.get("N8N_WEBHOOK_BASE") or "").strip() or None
        return cls(
            n8n_webhook_base=base.rstrip("/") if base else None,
            rate_limit=_env_int(env, "FLOWSMITH_RATE_LIMIT", cls.rate_limit),
            rate_window_sec=_env_float(env, "FLOWSMITH_RATE_WINDOW_SEC", cls.rate_window_sec),
            forward_timeout_sec=_env_float(env, "FLOWSMITH_FORWARD_TIMEOUT_SEC", cls.forward_timeout_sec),
        )
