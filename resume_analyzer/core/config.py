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


_DEFAULT_MODELS = {"gemini": "gemini-2.5-flash", "openai": "gpt-4o-mini"}


@dataclass(frozen=True)
class Settings:
    environment: str
    port: int
    log_level: str
    sentry_dsn: str | None
    ai_provider: str
    ai_model: str
    gemini_api_key: str | None
    google_application_credentials: str | None
    openai_api_key: str | None
    openai_base_url: str | None
    completion_timeout_s: float
    rate_limit_backend: str
    rate_limit_max_requests: int
    rate_limit_window_seconds: int
    rate_limit_key_prefix: str
    redis_addr: str
    redis_password: str | None
    redis_db: int
    trust_proxy_headers: bool
    cors_allowed_origins: tuple[str, ...]
    static_dir: str


def load_settings() -> Settings:
    ai_provider = (_get_env("AI_PROVIDER", "gemini") or "gemini").strip().lower()
    default_model = _DEFAULT_MODELS.get(ai_provider, "gemini-2.5-flash")
    return Settings(
        environment=_get_env("ENVIRONMENT", "development") or "development",
        port=_get_env_int("PORT", 8080),
        log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
        sentry_dsn=_get_env("SENTRY_DSN"),
        ai_provider=ai_provider,
        ai_model=(_get_env("AI_MODEL", default_model) or default_model).strip(),
        gemini_api_key=_get_env("GEMINI_API_KEY"),
        google_application_credentials=_get_env("GOOGLE_APPLICATION_CREDENTIALS"),
        openai_api_key=_get_env("OPENAI_API_KEY"),
        openai_base_url=_get_env("OPENAI_BASE_URL"),
        completion_timeout_s=_get_env_float("COMPLETION_TIMEOUT_S", 30.0),
        rate_limit_backend=(_get_env("RATE_LIMIT_BACKEND", "redis") or "redis").strip().lower(),
        rate_limit_max_requests=_get_env_int("RATE_LIMIT_MAX_REQUESTS", 3),
        rate_limit_window_seconds=_get_env_int("RATE_LIMIT_WINDOW_SECONDS", 24 * 60 * 60),
        rate_limit_key_prefix=_get_env("RATE_LIMIT_KEY_PREFIX", "usage:") or "usage:",
        redis_addr=_get_env("REDIS_ADDR", "localhost:6379") or "localhost:6379",
        redis_password=_get_env("REDIS_PASSWORD"),
        redis_db=_get_env_int("REDIS_DB", 0),
        trust_proxy_headers=_get_env_bool("TRUST_PROXY_HEADERS", True),
        cors_allowed_origins=_get_env_list("CORS_ALLOWED_ORIGINS", ["*"]),
        static_dir=_get_env("STATIC_DIR", "static") or "static",
    )


settings = load_settings()

if settings.ai_provider not in {"gemini", "openai"}:
    raise RuntimeError("AI_PROVIDER must be either 'gemini' or 'openai'.")

if settings.rate_limit_backend not in {"redis", "memory"}:
    raise RuntimeError("RATE_LIMIT_BACKEND must be either 'redis' or 'memory'.")
