"""FastAPI exception handlers converting RentalError to HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from rental.exceptions import ErrorCode, RentalError

logger = structlog.get_logger()

ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.MINIMUM_NIGHTS_NOT_MET: HTTP_400_BAD_REQUEST,
    ErrorCode.DATES_UNAVAILABLE: HTTP_409_CONFLICT,
    ErrorCode.BOOKING_LOCKED: HTTP_409_CONFLICT,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def rental_error_handler(request: Request, exc: RentalError) -> JSONResponse:
    status_code = get_http_status_for_error(exc.code)
    logger.info(
        "request_rejected",
        path=request.url.path,
        code=exc.code.value,
        status=status_code,
        message=exc.message,
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": exc.code.value, "message": exc.message}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RentalError, rental_error_handler)
