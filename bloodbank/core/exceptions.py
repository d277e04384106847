"""
Error taxonomy and the FastAPI handlers that render it.

Services raise BloodBankError subclasses at the point a rule is violated;
the handlers below turn them into {"msg": ..., "detail": ...} responses.
"""
import logging
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class BloodBankError(Exception):
    """Base class for business-rule failures."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class BadRequestError(BloodBankError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(BloodBankError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(BloodBankError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(BloodBankError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(BloodBankError):
    status_code = status.HTTP_409_CONFLICT


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "N/A")


def error_body(message, **extra) -> dict:
    """Error payload: the dashboards read msg, API clients read detail."""
    return {"msg": str(message), "detail": message, **extra}


async def blood_bank_exception_handler(request: Request, exc: BloodBankError):
    logger.info(
        f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.detail}",
        extra={"request_id": _request_id(request)}
    )
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.detail))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail),
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        errors.append({"field": location, "message": error.get("msg")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid request data", errors=errors)
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    if isinstance(exc, OperationalError):
        logger.error(
            f"Database unavailable on {request.method} {request.url.path}: {exc}",
            extra={"request_id": _request_id(request)}
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_body("Service temporarily unavailable")
        )
    logger.error(
        f"Database error on {request.method} {request.url.path}: {exc}",
        extra={"request_id": _request_id(request)}
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error")
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(
        f"Unhandled error on {request.method} {request.url.path}",
        extra={"request_id": _request_id(request)}
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error")
    )
