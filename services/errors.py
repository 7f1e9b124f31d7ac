# services/errors.py
"""
Error taxonomy shared by the ledger, the row store and the HTTP layer.

Services raise these and let them propagate; main.py maps each one onto a
transport-level response.
"""
from typing import Any, Dict, Optional


class ErrorCodes:
     """Standard error codes"""
     VALIDATION_ERROR = "VALIDATION_ERROR"
     NOT_FOUND = "NOT_FOUND"
     STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
     WEBHOOK_ERROR = "WEBHOOK_ERROR"
     UNAUTHORIZED = "UNAUTHORIZED"
     FORBIDDEN = "FORBIDDEN"
     CONFLICT = "CONFLICT"
     BAD_REQUEST = "BAD_REQUEST"
     INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class LedgerError(Exception):
     """Base class for every error the core raises."""

     code = "LEDGER_ERROR"
     status_code = 500

     def __init__(self, message: str, field: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
          self.message = message
          self.field = field
          self.context = context or {}
          super().__init__(message)


class ValidationError(LedgerError):
     """Missing or malformed input. Never retried."""

     code = ErrorCodes.VALIDATION_ERROR
     status_code = 400


class NotFound(LedgerError):
     """An identifier does not resolve to a live record."""

     code = ErrorCodes.NOT_FOUND
     status_code = 404


class Conflict(LedgerError):
     """The record already exists."""

     code = ErrorCodes.CONFLICT
     status_code = 409


class StoreUnavailable(LedgerError):
     """The backing store call failed (network, auth or quota)."""

     code = ErrorCodes.STORE_UNAVAILABLE
     status_code = 503

     def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
          super().__init__(message, context=context)
          self.original_error = original_error


class WebhookError(LedgerError):
     """Notification delivery failed. Caught by the publisher, never surfaced."""

     code = ErrorCodes.WEBHOOK_ERROR
     status_code = 502


class AuthError(LedgerError):
     code = ErrorCodes.UNAUTHORIZED
     status_code = 401


class Forbidden(LedgerError):
     code = ErrorCodes.FORBIDDEN
     status_code = 403
