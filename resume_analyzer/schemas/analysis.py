from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

# The model sometimes answers a list-valued key with a single string.
FlexibleText = Union[StrictStr, list[StrictStr]]


def as_items(value: FlexibleText) -> list[str]:
    if isinstance(value, str):
        return [value]
    return list(value)


class AnalysisRequest(BaseModel):
    resume: StrictStr = ""
    job_description: StrictStr = Field(default="", alias="jobDescription")


class AnalysisResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    match_score: int = Field(alias="matchScore")
    improvements: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list, alias="nextSteps")


class CompletionPayload(BaseModel):
    """JSON object produced by the completion service, before normalization."""

    model_config = ConfigDict(populate_by_name=True)

    match_score: StrictInt = Field(default=0, alias="matchScore")
    improvements: FlexibleText = Field(default_factory=list)
    next_steps: FlexibleText = Field(default_factory=list, alias="nextSteps")

    def normalized(self) -> AnalysisResponse:
        return AnalysisResponse(
            match_score=self.match_score,
            improvements=as_items(self.improvements),
            next_steps=as_items(self.next_steps),
        )
