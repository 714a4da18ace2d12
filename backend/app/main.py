"""FastAPI application."""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.app.api.routes.activities import router as activities_router
from backend.app.api.routes.feedback import router as feedback_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.plans import router as plans_router
from backend.app.api.routes.profiles import router as profiles_router
from backend.app.errors import AppError, ValidationError

logger = logging.getLogger(__name__)

app = FastAPI(title="Travel Planner API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(plans_router)
app.include_router(activities_router)
app.include_router(feedback_router)
app.include_router(profiles_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Map application errors onto their HTTP status."""
    if exc.is_operational:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    else:
        cause = getattr(exc, "original_error", None)
        logger.error(
            f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}"
            + (f" (caused by {type(cause).__name__}: {cause})" if cause else "")
        )

    body: dict[str, object] = {"error": exc.message}
    if isinstance(exc, ValidationError) and exc.details is not None:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies in the same envelope as other errors."""
    logger.warning(f"{request.method} {request.url.path} -> 400: invalid request")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for unexpected failures."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Travel Planner API", "version": "0.1.0"}
