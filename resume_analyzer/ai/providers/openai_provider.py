from __future__ import annotations

import os
from typing import Any, Optional

from openai import APITimeoutError, AsyncOpenAI

from resume_analyzer.ai.types import Candidate, Completion, FinishReason


_FINISH_REASONS: dict[str, FinishReason] = {
    "stop": "stop",
    "length": "max_tokens",
    "content_filter": "safety",
}


def to_completion(response: Any) -> Completion:
    candidates = []
    for choice in getattr(response, "choices", None) or []:
        message = getattr(choice, "message", None)
        text = getattr(message, "content", None)
        reason = getattr(choice, "finish_reason", None)
        candidates.append(
            Candidate(
                parts=(text,) if isinstance(text, str) and text else (),
                finish_reason=None if reason is None else _FINISH_REASONS.get(reason, "other"),
            )
        )
    return Completion(candidates=tuple(candidates))


class OpenAIProvider:
    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 30.0,
        temperature: float = 0.2,
        client: Optional[AsyncOpenAI] = None,
    ):
        self._model = model
        self._temperature = temperature
        if client is None:
            key = (api_key or os.getenv("OPENAI_API_KEY") or "").strip()
            if not key:
                raise RuntimeError("OPENAI_API_KEY is missing")
            client = AsyncOpenAI(
                api_key=key,
                base_url=base_url or None,
                timeout=timeout_s,
                max_retries=0,
            )
        self._client = client

    async def complete(self, prompt: str) -> Completion:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
            )
        except APITimeoutError as exc:
            raise TimeoutError(str(exc)) from exc
        return to_completion(response)

    async def close(self) -> None:
        await self._client.close()
