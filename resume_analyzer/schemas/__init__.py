from .analysis import AnalysisRequest, AnalysisResponse, CompletionPayload, FlexibleText, as_items

__all__ = [
    "AnalysisRequest",
    "AnalysisResponse",
    "CompletionPayload",
    "FlexibleText",
    "as_items",
]
