import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
import sentry_sdk
import uvicorn

from resume_analyzer.ai.types import CompletionClient
from resume_analyzer.api.v1.chat import router as chat_router
from resume_analyzer.api.v1.health import router as health_router
from resume_analyzer.core.config import Settings, settings
from resume_analyzer.core.counter_store import CounterStore
from resume_analyzer.core.cors import CORS_ALLOWED_HEADERS, CORS_ALLOWED_METHODS, cors_allowed_origins
from resume_analyzer.core.errors import AnalysisError
from resume_analyzer.core.lifespan import lifespan

logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.environment)


async def _analysis_error_handler(request: Request, exc: AnalysisError) -> PlainTextResponse:
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def create_app(
    config: Settings = settings,
    *,
    completion_client: CompletionClient | None = None,
    counter_store: CounterStore | None = None,
) -> FastAPI:
    """Build the API; clients left as None are created from ``config`` at startup."""
    app = FastAPI(title="Resume Analyzer API", version="1.0.0", lifespan=lifespan)
    app.state.settings = config
    app.state.completion_client = completion_client
    app.state.counter_store = counter_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_allowed_origins(config),
        allow_methods=CORS_ALLOWED_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
    )
    app.add_exception_handler(AnalysisError, _analysis_error_handler)

    app.include_router(health_router, tags=["Health"])
    app.include_router(chat_router, tags=["Chat"])

    # Mounted last so the API routes win over the catch-all static handler.
    if Path(config.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=config.static_dir, html=True), name="static")
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("resume_analyzer.main:app", host="0.0.0.0", port=settings.port)
