from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_credentials: bool
    ai_provider: str
    ai_model: str | None
    oracle_timeout_s: float
    interrogation_max_turns: int
    scoring_backend: str
    max_extracted_chars: int
    max_upload_bytes: int
    session_ttl_minutes: int
    pdf_library_first: bool
    job_fetch_timeout_s: float


settings = Settings(
    rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://localhost:8080",
        ],
    ),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", False),
    ai_provider=(_get_env("AI_PROVIDER", "openai") or "openai").strip().lower(),
    ai_model=(_get_env("AI_MODEL") or "").strip() or None,
    oracle_timeout_s=_get_env_float("ORACLE_TIMEOUT_S", 45.0),
    interrogation_max_turns=_get_env_int("INTERROGATION_MAX_TURNS", 20),
    scoring_backend=(_get_env("SCORING_BACKEND", "heuristic") or "heuristic").strip().lower(),
    max_extracted_chars=_get_env_int("MAX_EXTRACTED_CHARS", 50000),
    max_upload_bytes=_get_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
    session_ttl_minutes=_get_env_int("SESSION_TTL_MINUTES", 120),
    pdf_library_first=_get_env_bool("PDF_LIBRARY_FIRST", True),
    job_fetch_timeout_s=_get_env_float("JOB_FETCH_TIMEOUT_S", 12.0),
)

if settings.ai_provider not in {"openai", "gemini"}:
    raise RuntimeError("AI_PROVIDER must be either 'openai' or 'gemini'.")

if settings.scoring_backend not in {"heuristic", "llm"}:
    raise RuntimeError("SCORING_BACKEND must be either 'heuristic' or 'llm'.")
