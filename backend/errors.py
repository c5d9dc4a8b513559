# errors.py
"""
Domain exceptions shared by the services and mapped to HTTP codes in api.py.
"""

from typing import Optional


class CareerPrepError(Exception):
    """Base class for errors the HTTP layer knows how to report."""
    status_code = 500


class InvalidRequestError(CareerPrepError):
    status_code = 400


class NotFoundError(CareerPrepError):
    status_code = 404


class ConflictError(CareerPrepError):
    status_code = 409


class ModelGatewayError(CareerPrepError):
    """
    The model call failed: transport error, non-success status,
    empty/non-JSON content, or JSON that does not fit the expected shape.
    """
    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body


class PayloadTooLargeError(CareerPrepError):
    status_code = 413


class RequestFailedError(CareerPrepError):
    """
    A request failed for a reason the caller cannot fix.

    `str(e)` is the short summary ("Failed to analyze resume"); detail holds
    the underlying message.
    """
    status_code = 500

    def __init__(self, summary: str, detail: str):
        super().__init__(summary)
        self.detail = detail
