# hapibara/api/errors.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from hapibara.domain.errors import HapiBaraError
from hapibara.utils.logging import get_logger

logger = get_logger(__name__)


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if location:
        return f"Invalid {location}: {first.get('msg')}"
    return f"Invalid request: {first.get('msg')}"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HapiBaraError)
    async def handle_domain_error(request: Request, exc: HapiBaraError):
        if exc.status_code >= 500:
            logger.error("Request failed", path=request.url.path, error=exc.message, exc_info=exc.__cause__)
        headers = {"WWW-Authenticate": "X-User-Id"} if exc.status_code == 401 else None
        return error_response(exc.status_code, exc.message, headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return error_response(400, _describe_validation_error(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        # pelny opis tylko w logach, klient dostaje ogolny komunikat
        logger.exception("Unhandled error", path=request.url.path)
        return error_response(500, "Internal server error")
