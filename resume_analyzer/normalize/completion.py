from __future__ import annotations

from pydantic import ValidationError

from resume_analyzer.ai.types import Completion
from resume_analyzer.core.errors import EmptyResponse, MalformedResponse, SafetyBlocked
from resume_analyzer.schemas.analysis import AnalysisResponse, CompletionPayload

_OPENING_FENCES = ("```json", "```")
_CLOSING_FENCE = "```"


def ensure_not_blocked(completion: Completion) -> None:
    if completion.candidates and completion.candidates[0].finish_reason == "safety":
        raise SafetyBlocked(detail="first candidate finished with reason SAFETY")


def extract_text(completion: Completion) -> str:
    if not completion.candidates or not completion.candidates[0].parts:
        raise EmptyResponse(detail="no candidate or no content part in completion")
    return completion.candidates[0].parts[0]


def strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    for fence in _OPENING_FENCES:
        if cleaned.startswith(fence):
            cleaned = cleaned[len(fence):]
            break
    if cleaned.endswith(_CLOSING_FENCE):
        cleaned = cleaned[: -len(_CLOSING_FENCE)]
    return cleaned.strip()


def normalize_completion_text(text: str) -> AnalysisResponse:
    cleaned = strip_code_fence(text)
    try:
        payload = CompletionPayload.model_validate_json(cleaned)
    except ValidationError as exc:
        raise MalformedResponse(detail=f"{exc.error_count()} error(s): {exc.errors()[0]['msg']}") from exc
    return payload.normalized()


def normalize_completion(completion: Completion) -> AnalysisResponse:
    ensure_not_blocked(completion)
    return normalize_completion_text(extract_text(completion))
