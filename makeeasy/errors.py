"""
Exception handlers that render every failure as {"success": false, "error": ...}.
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from tortoise.exceptions import DoesNotExist, IntegrityError, ValidationError

from makeeasy.lifecycle import TransitionRejected
from makeeasy.storage import InvalidUpload


def error_response(status_code: int, detail, headers=None) -> JSONResponse:
    body = {"success": False}
    if isinstance(detail, dict):
        body.update(detail)
    else:
        body["error"] = str(detail)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, exc.detail, getattr(exc, "headers", None))


async def transition_rejected_handler(request: Request, exc: TransitionRejected):
    return error_response(status.HTTP_400_BAD_REQUEST, exc.message)


async def invalid_upload_handler(request: Request, exc: InvalidUpload):
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


async def does_not_exist_handler(request: Request, exc: DoesNotExist):
    return error_response(status.HTTP_404_NOT_FOUND, "Resource not found")


async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(
        "Integrity error on {} {}: {}", request.method, request.url.path, exc
    )
    return error_response(status.HTTP_400_BAD_REQUEST, "Duplicate field value entered")


async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        field = ".".join(
            str(part) for part in err["loc"] if part not in ("body", "query", "path")
        )
        messages.append(f"{field}: {err['msg']}" if field else err["msg"])
    return error_response(status.HTTP_400_BAD_REQUEST, ", ".join(messages))


async def validation_error_handler(request: Request, exc: ValidationError):
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on {} {}", request.method, request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Server Error"
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(TransitionRejected, transition_rejected_handler)
    app.add_exception_handler(InvalidUpload, invalid_upload_handler)
    app.add_exception_handler(DoesNotExist, does_not_exist_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
