"""Global error handlers rendering RFC 7807 problem details."""
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.utils.errors import AppException

logger = structlog.get_logger()

_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    502: "Bad Gateway",
    503: "Service Unavailable",
}


def _problem(status: int, detail: str, error_type: str = "about:blank", instance: str | None = None) -> JSONResponse:
    content = {
        "type": error_type,
        "title": _TITLES.get(status, "Error"),
        "status": status,
        "detail": detail,
    }
    if instance:
        content["instance"] = instance
    return JSONResponse(status_code=status, content=content)


def setup_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning("app_exception", error_type=exc.error_type, detail=exc.detail, path=request.url.path)
        return _problem(exc.status_code, exc.detail, exc.error_type, request.url.path)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return _problem(400, str(exc), instance=request.url.path)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", error=str(exc), path=request.url.path, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "type": "about:blank",
                "title": "Internal Server Error",
                "status": 500,
                "detail": "An unexpected error occurred.",
            },
        )
