from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_API_BASE_URL = "http://localhost:5000/api"


def _parse_positive_int(name: str, default: str) -> int:
    raw = os.getenv(name, default).strip()
    try:
        value = int(raw)
    except ValueError as e:
        raise RuntimeError(f"Invalid {name} value: {raw!r}. Expected integer.") from e

    if value < 1:
        raise RuntimeError(f"{name} must be >= 1")
    return value


def _parse_positive_float(name: str, default: str) -> float:
    raw = os.getenv(name, default).strip()
    try:
        value = float(raw)
    except ValueError as e:
        raise RuntimeError(f"Invalid {name} value: {raw!r}. Expected number.") from e

    if value <= 0:
        raise RuntimeError(f"{name} must be > 0")
    return value


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_BASE_URL

    # Raw Cookie header value of a logged-in session, e.g. "connect.sid=...".
    session_cookie: str | None = None

    # Defaults for the CLI; the picker itself always gets them explicitly.
    business_id: str | None = None
    duration_minutes: int = 60

    # Query window
    slot_interval_minutes: int = 30
    window_days: int = 7

    # HTTP tuning
    request_timeout_seconds: float = 20.0

    # How many times the CLI tries a fetch that failed on transport.
    # 1 means no automatic retry; the picker itself never retries.
    fetch_retry_attempts: int = 1

    # --watch polling interval
    refresh_interval_seconds: int = 300


def load_settings(dotenv_path: str | None = None) -> Settings:
    # Prefer .env in repo root; dotenv_path allows overriding in tests.
    load_dotenv(dotenv_path=dotenv_path, override=False)

    api_base_url = os.getenv("API_BASE_URL", DEFAULT_API_BASE_URL).strip().rstrip("/")
    if not api_base_url.startswith(("http://", "https://")):
        raise RuntimeError(f"Invalid API_BASE_URL value: {api_base_url!r}. Expected http(s) URL.")

    session_cookie = os.getenv("SESSION_COOKIE", "").strip() or None
    business_id = os.getenv("BUSINESS_ID", "").strip() or None

    return Settings(
        api_base_url=api_base_url,
        session_cookie=session_cookie,
        business_id=business_id,
        duration_minutes=_parse_positive_int("DURATION_MINUTES", "60"),
        slot_interval_minutes=_parse_positive_int("SLOT_INTERVAL_MINUTES", "30"),
        window_days=_parse_positive_int("WINDOW_DAYS", "7"),
        request_timeout_seconds=_parse_positive_float("REQUEST_TIMEOUT_SECONDS", "20"),
        fetch_retry_attempts=_parse_positive_int("FETCH_RETRY_ATTEMPTS", "1"),
        refresh_interval_seconds=_parse_positive_int("REFRESH_INTERVAL_SECONDS", "300"),
    )
