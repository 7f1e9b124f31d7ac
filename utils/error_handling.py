# utils/error_handling.py
"""
Translate errors into the standard JSON error body:

     {"success": false, "error": {"code", "message", "field"}, "timestamp"}
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.errors import ErrorCodes, LedgerError, NotFound, StoreUnavailable, ValidationError

logger = logging.getLogger(__name__)

STATUS_TO_CODE = {
     400: ErrorCodes.BAD_REQUEST,
     401: ErrorCodes.UNAUTHORIZED,
     403: ErrorCodes.FORBIDDEN,
     404: ErrorCodes.NOT_FOUND,
     409: ErrorCodes.CONFLICT,
     503: ErrorCodes.STORE_UNAVAILABLE,
}


def create_error_response(error_code: str, message: str, status_code: int, field: Optional[str] = None) -> JSONResponse:
     return JSONResponse(
          status_code=status_code,
          content={
               "success": False,
               "error": {"code": error_code, "message": message, "field": field},
               "timestamp": datetime.now(timezone.utc).isoformat(),
          },
     )


async def ledger_exception_handler(request: Request, exc: LedgerError):
     if isinstance(exc, StoreUnavailable):
          logger.error(
               "Store unavailable on %s %s: %s (context=%s, cause=%s)",
               request.method, request.url.path, exc.message, exc.context, exc.original_error,
               exc_info=exc,
          )
     elif isinstance(exc, (NotFound, ValidationError)):
          logger.info("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
     else:
          logger.warning("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
     return create_error_response(exc.code, exc.message, exc.status_code, exc.field)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
     first_error = exc.errors()[0]
     field = ".".join(str(loc) for loc in first_error.get("loc", ())[1:]) or None
     message = first_error.get("msg", "Validation error")
     logger.info("Request validation failed on %s: %s", field, message)
     return create_error_response(ErrorCodes.VALIDATION_ERROR, f"Validation error on field '{field}': {message}", 400, field)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
     code = STATUS_TO_CODE.get(exc.status_code, ErrorCodes.INTERNAL_SERVER_ERROR)
     logger.warning("HTTP exception: %s - %s", exc.status_code, exc.detail)
     response = create_error_response(code, str(exc.detail), exc.status_code)
     if exc.headers:
          response.headers.update(exc.headers)
     return response


async def general_exception_handler(request: Request, exc: Exception):
     logger.exception("Unexpected error on %s %s", request.method, request.url.path)
     return create_error_response(
          ErrorCodes.INTERNAL_SERVER_ERROR,
          "An unexpected error occurred. Please try again later.",
          500,
     )


def add_error_handlers(app):
     """Add all error handlers to FastAPI app"""
     app.add_exception_handler(LedgerError, ledger_exception_handler)
     app.add_exception_handler(RequestValidationError, validation_exception_handler)
     app.add_exception_handler(StarletteHTTPException, http_exception_handler)
     app.add_exception_handler(Exception, general_exception_handler)
