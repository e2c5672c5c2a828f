from __future__ import annotations

import asyncio
import json
import logging
import time

from resume_analyzer.ai.types import Completion, CompletionClient
from resume_analyzer.core.errors import (
    EmptyResponse,
    MalformedResponse,
    SafetyBlocked,
    UpstreamCallFailure,
    UpstreamTimeout,
)
from resume_analyzer.core.rate_limit import RateLimiter
from resume_analyzer.normalize.completion import (
    ensure_not_blocked,
    extract_text,
    normalize_completion_text,
    strip_code_fence,
)
from resume_analyzer.prompts.analysis import build_analysis_prompt
from resume_analyzer.schemas.analysis import AnalysisRequest, AnalysisResponse

logger = logging.getLogger("resume_analyzer.analysis")


class AnalysisService:
    """Runs one resume/job-description analysis against the completion service.

    Holds no per-request state; the completion client and the rate limiter
    are built once at startup and shared by every request.
    """

    def __init__(
        self,
        completion_client: CompletionClient,
        rate_limiter: RateLimiter,
        timeout_s: float = 30.0,
        trust_proxy_headers: bool = True,
    ):
        self.completion_client = completion_client
        self.rate_limiter = rate_limiter
        self.timeout_s = timeout_s
        self.trust_proxy_headers = trust_proxy_headers

    async def _request_completion(self, prompt: str, client_key: str) -> Completion:
        try:
            return await asyncio.wait_for(
                self.completion_client.complete(prompt),
                timeout=self.timeout_s,
            )
        except (asyncio.TimeoutError, TimeoutError) as exc:
            logger.error(
                json.dumps(
                    {
                        "event": "analysis_upstream_timeout",
                        "client_key": client_key,
                        "timeout_s": self.timeout_s,
                    }
                )
            )
            raise UpstreamTimeout(detail=f"no completion after {self.timeout_s}s") from exc
        except Exception as exc:  # noqa: BLE001 - any SDK failure ends the request the same way
            logger.error(
                json.dumps(
                    {
                        "event": "analysis_upstream_error",
                        "client_key": client_key,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    }
                )
            )
            raise UpstreamCallFailure(detail=str(exc)) from exc

    async def analyze(
        self,
        payload: AnalysisRequest,
        *,
        client_key: str,
        usage: int,
    ) -> AnalysisResponse:
        started_at = time.perf_counter()
        logger.info(
            json.dumps(
                {
                    "event": "analysis_request",
                    "client_key": client_key,
                    "usage": usage,
                    "limit": self.rate_limiter.max_requests,
                    "resume_len": len(payload.resume),
                    "job_description_len": len(payload.job_description),
                }
            )
        )

        prompt = build_analysis_prompt(payload.resume, payload.job_description)
        completion = await self._request_completion(prompt, client_key)

        try:
            ensure_not_blocked(completion)
        except SafetyBlocked:
            logger.warning(json.dumps({"event": "analysis_safety_blocked", "client_key": client_key}))
            raise

        try:
            text = extract_text(completion)
        except EmptyResponse:
            logger.error(json.dumps({"event": "analysis_empty_response", "client_key": client_key}))
            raise

        try:
            result = normalize_completion_text(text)
        except MalformedResponse as exc:
            logger.error(
                json.dumps(
                    {
                        "event": "analysis_malformed",
                        "client_key": client_key,
                        "error": exc.detail,
                        "cleaned": strip_code_fence(text),
                    }
                )
            )
            raise

        logger.info(
            json.dumps(
                {
                    "event": "analysis_complete",
                    "client_key": client_key,
                    "match_score": result.match_score,
                    "duration_ms": int((time.perf_counter() - started_at) * 1000),
                }
            )
        )
        return result
