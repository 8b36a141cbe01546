"""Exception handlers turning pipeline errors into structured JSON bodies."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pitch_core.exceptions import ErrorCategory, PitchCoachError
from pitch_core.logging_config import get_logger

logger = get_logger("api.errors")


def error_body(exc: PitchCoachError) -> tuple[int, dict]:
    """HTTP status and response body for a pipeline error."""
    subject = exc.subject
    details = str(exc)

    if exc.category is ErrorCategory.CLIENT_INPUT:
        return status.HTTP_400_BAD_REQUEST, {"ok": False, "error": details}

    if exc.category is ErrorCategory.CONFIGURATION:
        return status.HTTP_500_INTERNAL_SERVER_ERROR, {
            "ok": False,
            "error": "Language model is not configured",
            "details": details,
        }

    if exc.category is ErrorCategory.EXTRACTION:
        return status.HTTP_500_INTERNAL_SERVER_ERROR, {
            "ok": False,
            "error": f"Failed to parse {subject}",
            "details": details,
            "parseError": True,
        }

    if exc.category is ErrorCategory.VALIDATION:
        return status.HTTP_500_INTERNAL_SERVER_ERROR, {
            "ok": False,
            "error": f"Invalid {subject} structure",
            "details": (
                f"The AI returned a {subject} that does not match the required format: {details}"
            ),
            "parseError": False,
        }

    return status.HTTP_500_INTERNAL_SERVER_ERROR, {
        "ok": False,
        "error": f"Failed to generate {subject}",
        "details": details or "Unknown error",
        "parseError": False,
    }


async def pitch_coach_error_handler(request: Request, exc: PitchCoachError) -> JSONResponse:
    status_code, body = error_body(exc)
    if status_code >= 500:
        logger.error("%s %s failed (%s): %s", request.method, request.url.path, exc.category.value, exc)
    return JSONResponse(status_code=status_code, content=body)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', 'invalid')}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"ok": False, "error": "Invalid request body", "details": details},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Auth, lookup and upload errors in the same envelope as pipeline errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the handlers to an application."""
    app.add_exception_handler(PitchCoachError, pitch_coach_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
