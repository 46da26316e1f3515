import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from produto_api.errors import ErrorType, ERROR_STATUS_MAP

logger = logging.getLogger(__name__)

# Messages reported for a failing request field, keyed by HTTP method then field name.
# Other methods report pydantic's own message.
FIELD_MESSAGES = {
    "POST": {
        "descricao": "descricao is required and must be a non-empty string of at most 255 characters",
        "rating": "rating must be an integer between 1 and 5",
    },
}


class AppException(Exception):
    """Custom exception that the data access layer can raise."""

    def __init__(self, error_type: ErrorType, message: str, details: str | None = None):
        self.error_type = error_type
        self.message = message
        self.details = details
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_MAP.get(self.error_type, 500)

    def to_response(self) -> dict:
        content = {"error": self.message}
        if self.details is not None:
            content["details"] = self.details
        return content


async def app_exception_handler(_request: Request, exc: AppException) -> JSONResponse:
    """Global handler for AppException - converts to proper HTTP response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response()
    )


def build_validation_details(errors: list[dict], field_messages: dict | None = None) -> list[dict]:
    """One entry per failing field: message, field name and its location."""
    details = []
    seen = set()
    for e in errors:
        loc = e.get("loc", ())
        location = str(loc[0]) if loc else "body"
        param = ".".join(str(part) for part in loc[1:]) or location
        if (location, param) in seen:
            continue
        seen.add((location, param))
        details.append({
            "msg": (field_messages or {}).get(param, e.get("msg", "invalid value")),
            "param": param,
            "location": location,
        })
    return details


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request validation failures are client errors (400), not 422."""
    details = build_validation_details(exc.errors(), FIELD_MESSAGES.get(request.method))
    logger.warning(f"Validation error on {request.url.path}: {details}")
    return JSONResponse(
        status_code=ERROR_STATUS_MAP[ErrorType.VALIDATION],
        content={"error": "validation failed", "details": details}
    )


def rate_limit_exception_handler(_request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # SlowAPIMiddleware calls this without awaiting
    return JSONResponse(
        status_code=ERROR_STATUS_MAP[ErrorType.RATE_LIMIT],
        content={
            "error": "too many requests, please try again later",
            "details": str(exc.detail),
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global handler for unhandled exceptions - returns 500 without internals."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "internal server error"}
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
