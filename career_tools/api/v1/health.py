from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check(request: Request):
    client = getattr(request.app.state, "model_client", None)
    return {
        "status": "healthy",
        "model": getattr(client, "model", None),
        "modelConfigured": bool(getattr(client, "configured", False)),
    }
