from __future__ import annotations

from typing import Any, Optional

from google import genai
from google.genai import types as genai_types

from resume_analyzer.ai.types import Candidate, Completion, FinishReason


_FINISH_REASONS: dict[Any, FinishReason] = {
    genai_types.FinishReason.STOP: "stop",
    genai_types.FinishReason.MAX_TOKENS: "max_tokens",
    genai_types.FinishReason.SAFETY: "safety",
}


def _text_parts(candidate: Any) -> tuple[str, ...]:
    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) or []
    texts: list[str] = []
    for part in parts:
        if getattr(part, "thought", False):
            continue
        text = getattr(part, "text", None)
        if isinstance(text, str):
            texts.append(text)
    return tuple(texts)


def to_completion(response: Any) -> Completion:
    candidates = []
    for cand in getattr(response, "candidates", None) or []:
        reason = getattr(cand, "finish_reason", None)
        candidates.append(
            Candidate(
                parts=_text_parts(cand),
                finish_reason=None if reason is None else _FINISH_REASONS.get(reason, "other"),
            )
        )
    return Completion(candidates=tuple(candidates))


class GeminiProvider:
    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        self._model = model
        if client is None:
            # Without a key the SDK goes through Vertex AI with application-default credentials.
            client = genai.Client(api_key=api_key) if api_key else genai.Client(vertexai=True)
        self._client = client

    async def complete(self, prompt: str) -> Completion:
        response = await self._client.aio.models.generate_content(
            model=self._model,
            contents=prompt,
        )
        return to_completion(response)

    async def close(self) -> None:
        await self._client.aio.aclose()
