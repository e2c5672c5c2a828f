from __future__ import annotations

from fastapi import status


_WINDOW_UNITS = ((24 * 60 * 60, "day"), (60 * 60, "hour"), (60, "minute"), (1, "second"))


def describe_window(seconds: int) -> str:
    for size, unit in _WINDOW_UNITS:
        if seconds >= size and seconds % size == 0:
            count = seconds // size
            return unit if count == 1 else f"{count} {unit}s"
    return f"{seconds} seconds"


class AnalysisError(Exception):
    """Terminal failure of a single /chat request.

    ``message`` is what the caller sees; ``detail`` is only ever logged.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Could not process request"

    def __init__(self, message: str | None = None, *, detail: str | None = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(detail or self.message)


class InvalidMethod(AnalysisError):
    status_code = status.HTTP_405_METHOD_NOT_ALLOWED
    message = "Only POST method is allowed"


class InvalidBody(AnalysisError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request body"


class RateLimited(AnalysisError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, limit: int, window_seconds: int = 24 * 60 * 60, *, detail: str | None = None):
        self.limit = limit
        self.window_seconds = window_seconds
        super().__init__(
            f"You have reached the limit of {limit} requests per {describe_window(window_seconds)}.",
            detail=detail,
        )


class StoreFailure(AnalysisError):
    message = "Could not process request"


class UpstreamCallFailure(AnalysisError):
    message = "Failed to get analysis from AI model"


class UpstreamTimeout(AnalysisError):
    message = "The AI model took too long to respond. Please try again."


class SafetyBlocked(AnalysisError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = (
        "The analysis was blocked by the content safety filter. "
        "This can happen due to sensitive information. Please try again with different text."
    )


class EmptyResponse(AnalysisError):
    message = "Received an empty response from the AI model"


class MalformedResponse(AnalysisError):
    message = "Failed to parse AI model response"


class EncodeFailure(AnalysisError):
    message = "Failed to encode response"
