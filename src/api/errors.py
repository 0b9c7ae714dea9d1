"""Error responses.

Every failure is rendered as ``{"message": ...}``; unexpected failures also
carry the internal error string under ``"error"``.
"""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class InternalServerError(HTTPException):
    """500 with a user-facing message and the underlying error text."""

    def __init__(self, message: str, error: Exception | str):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)
        self.error = str(error)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = {"message": exc.detail}
    if isinstance(exc, InternalServerError):
        body["error"] = exc.error
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.detail, exc.error)
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Request validation maps to 400 rather than FastAPI's default 422
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error", "error": str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
