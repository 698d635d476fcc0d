from contextlib import asynccontextmanager

import sentry_sdk
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import health_router, licenses_router
from app.models.license import ErrorResponse, LicenseErrorCode, MethodNotAllowedResponse
from app.services.db.supabase import SupabaseConnectionService
from app.settings import settings

logger = structlog.get_logger(__name__)

if not settings.debug and settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        traces_sample_rate=1.0,
        profiles_sample_rate=1.0,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        if settings.db_config is not None:
            await SupabaseConnectionService().connect()
        else:
            logger.warning("Supabase is not configured, license endpoints will answer server_error")
        if not settings.admin_issue_secret:
            logger.warning("ADMIN_ISSUE_SECRET is not set, license issuance is disabled")
        yield
    finally:
        await SupabaseConnectionService().disconnect()


app = FastAPI(title="CallTrack Pro license API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=False,
    allow_methods=["POST"],
    allow_headers=["content-type", "x-admin-secret"],
)


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return JSONResponse(status_code=405, content=MethodNotAllowedResponse().model_dump(mode="json"))
    return await http_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def invalid_request_handler(request: Request, exc: RequestValidationError):
    detail = "; ".join(str(error.get("msg")) for error in exc.errors())
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error=LicenseErrorCode.INVALID_REQUEST, detail=detail).model_dump(mode="json")
    )


app.include_router(health_router)
app.include_router(licenses_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8123, reload=settings.debug)
