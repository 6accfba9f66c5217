from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]  # .../repo root
load_dotenv(dotenv_path=ROOT_DIR / ".env")


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int | None = None) -> int | None:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return int(v)


def _get_float(*keys: str, default: float | None = None) -> float | None:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return float(v)


@dataclass(frozen=True)
class Settings:
    bot_token: str
    api_endpoint: str
    request_timeout: float
    search_debounce_ms: int
    currency: str
    decimals: int
    log_level: str
    max_chats: int

    @property
    def search_debounce(self) -> float:
        return self.search_debounce_ms / 1000.0


settings = Settings(
    bot_token=_get_env("BOT_TOKEN", "TELEGRAM_BOT_TOKEN", default="") or "",
    api_endpoint=(
        _get_env("API_ENDPOINT", "BACKEND_URL", default="http://localhost:8082/api/v1") or ""
    ).rstrip("/"),
    request_timeout=_get_float("REQUEST_TIMEOUT", default=30.0) or 30.0,
    search_debounce_ms=_get_int("SEARCH_DEBOUNCE_MS", default=500) or 0,
    currency=_get_env("CURRENCY", default="$") or "$",
    decimals=_get_int("DECIMALS", default=2) or 2,
    log_level=(_get_env("LOG_LEVEL", default="INFO") or "INFO").upper(),
    max_chats=_get_int("MAX_CHATS", default=1000) or 1000,
)
