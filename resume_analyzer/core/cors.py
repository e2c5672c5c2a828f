from __future__ import annotations

from resume_analyzer.core.config import Settings, settings

CORS_ALLOWED_METHODS = ["GET", "POST", "OPTIONS"]
CORS_ALLOWED_HEADERS = ["Content-Type"]


def cors_allowed_origins(config: Settings = settings) -> list[str]:
    return list(config.cors_allowed_origins)
