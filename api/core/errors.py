"""
Error taxonomy shared by handlers, the dispatcher and the HTTP layer.

Each error carries the HTTP status it maps to and a client-facing message.
Internal details never go into `message`; log them where they are caught.
"""

from __future__ import annotations


class QuoteServiceError(Exception):
    status_code = 500
    default_message = "internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(QuoteServiceError):
    """Malformed input, unknown category reference, empty required field."""

    status_code = 400
    default_message = "data format error"


class NotFound(QuoteServiceError):
    status_code = 404
    default_message = "not found"


class ResourceExhausted(QuoteServiceError):
    """No pooled connection became available before the deadline."""

    status_code = 503
    default_message = "service temporarily unavailable"


class Internal(QuoteServiceError):
    status_code = 500
    default_message = "internal server error"
