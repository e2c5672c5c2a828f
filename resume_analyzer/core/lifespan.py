from contextlib import AsyncExitStack, asynccontextmanager
import logging

from resume_analyzer.ai.factory import get_completion_client
from resume_analyzer.core.counter_store import build_counter_store
from resume_analyzer.core.rate_limit import RateLimiter
from resume_analyzer.services.analysis_service import AnalysisService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    config = app.state.settings
    async with AsyncExitStack() as stack:
        completion_client = app.state.completion_client or get_completion_client(config)
        stack.push_async_callback(completion_client.close)
        logger.info("completion_client_ready provider=%s model=%s", config.ai_provider, config.ai_model)

        counter_store = app.state.counter_store or build_counter_store(config)
        stack.push_async_callback(counter_store.close)
        # An unreachable store aborts startup; there is no degraded mode without rate limiting.
        await counter_store.ping()
        logger.info("counter_store_ready backend=%s", config.rate_limit_backend)

        app.state.analysis_service = AnalysisService(
            completion_client=completion_client,
            rate_limiter=RateLimiter(
                counter_store,
                max_requests=config.rate_limit_max_requests,
                window_seconds=config.rate_limit_window_seconds,
            ),
            timeout_s=config.completion_timeout_s,
            trust_proxy_headers=config.trust_proxy_headers,
        )
        yield
