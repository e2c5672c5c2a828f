from dataclasses import dataclass, field
from typing import Literal, Protocol


FinishReason = Literal["stop", "max_tokens", "safety", "other"]


@dataclass(frozen=True)
class Candidate:
    parts: tuple[str, ...] = ()
    finish_reason: FinishReason | None = None


@dataclass(frozen=True)
class Completion:
    candidates: tuple[Candidate, ...] = field(default_factory=tuple)


class CompletionClient(Protocol):
    async def complete(self, prompt: str) -> Completion: ...

    async def close(self) -> None: ...
