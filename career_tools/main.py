import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import sentry_sdk

from career_tools.api.v1.analysis import router as analysis_router
from career_tools.api.v1.health import router as health_router
from career_tools.api.v1.interview import router as interview_router
from career_tools.core.errors import AnalysisError, RequestValidationFailed
from career_tools.core.rate_limit import limiter
from career_tools.core.config import settings
from career_tools.core.lifespan import lifespan
from career_tools.schemas.common import ApiEnvelope

logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

logger = logging.getLogger(__name__)

app = FastAPI(title="Career Tools Analysis API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


def _error_response(status_code: int, message: str, details: dict | None = None) -> JSONResponse:
    body = ApiEnvelope(success=False, error=message, data=details).to_wire()
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError):
    details: dict = {"code": exc.code}
    if isinstance(exc, RequestValidationFailed):
        if exc.missing_fields:
            details["missingFields"] = exc.missing_fields
        if exc.invalid_range:
            details["invalidRange"] = exc.invalid_range
        if exc.invalid_content:
            details["invalidContent"] = exc.invalid_content
    if exc.status_code >= 500:
        logger.error("request_failed path=%s code=%s error=%s", request.url.path, exc.code, exc)
    else:
        logger.info("request_rejected path=%s code=%s", request.url.path, exc.code)
    return _error_response(exc.status_code, str(exc), details)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "Request body is malformed",
        {"code": RequestValidationFailed.code, "invalidRange": fields},
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return _error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Too many requests. Please wait a minute and try again.",
        {"code": "rate_limited"},
    )


app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(analysis_router, prefix="/v1", tags=["Analysis"])
app.include_router(interview_router, prefix="/v1", tags=["Interview"])
