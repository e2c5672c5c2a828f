from fastapi import APIRouter, Request

router = APIRouter()

API_VERSION = "1.0.0"


@router.get("/healthz", summary="Health Check", description="Check the health status of the application.")
async def health_check(request: Request):
    return {
        "status": "available",
        "environment": request.app.state.settings.environment,
        "version": API_VERSION,
    }
