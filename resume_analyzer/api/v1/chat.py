from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from resume_analyzer.core.errors import EncodeFailure, InvalidBody, InvalidMethod
from resume_analyzer.core.rate_limit import client_key
from resume_analyzer.schemas.analysis import AnalysisRequest, AnalysisResponse
from resume_analyzer.services.analysis_service import AnalysisService

router = APIRouter()


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


async def _decode_body(request: Request) -> AnalysisRequest:
    raw = await request.body()
    try:
        return AnalysisRequest.model_validate_json(raw)
    except ValidationError as exc:
        raise InvalidBody(detail=str(exc)) from exc


def _encode(result: AnalysisResponse) -> JSONResponse:
    try:
        return JSONResponse(content=result.model_dump(by_alias=True))
    except (TypeError, ValueError) as exc:
        raise EncodeFailure(detail=str(exc)) from exc


@router.post("/chat", response_model=AnalysisResponse)
async def chat(request: Request, service: AnalysisService = Depends(get_analysis_service)):
    key = client_key(request, service.trust_proxy_headers)
    usage = await service.rate_limiter.hit(key)
    payload = await _decode_body(request)
    result = await service.analyze(payload, client_key=key, usage=usage)
    return _encode(result)


@router.api_route(
    "/chat",
    methods=["GET", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def chat_method_not_allowed():
    raise InvalidMethod()
