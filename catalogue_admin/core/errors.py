"""Error taxonomy for catalogue access.

Errors that reach a client carry an HTTP status, a stable ``error`` tag and a
human readable message; the exception handlers in ``catalogue_admin.main``
turn them into the standard JSON envelope.  Tracking and notification
failures are never surfaced: callers log them and carry on.
"""

from __future__ import annotations


class CatalogueAccessError(Exception):
    """Base class for errors reported to the caller."""

    status_code: int = 400
    default_error: str = "bad_request"
    default_message: str = "Bad request"

    def __init__(self, error: str | None = None, message: str | None = None) -> None:
        self.error = error or self.default_error
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(CatalogueAccessError):
    """Catalogue/product unknown or inactive, or the blob is gone from storage."""

    status_code = 404
    default_error = "catalogue_not_found"
    default_message = "Catalogue not found"


class ValidationFailedError(CatalogueAccessError):
    status_code = 400
    default_error = "validation_failed"
    default_message = "Validation failed"


class TransferFailedError(CatalogueAccessError):
    """Delivery failed before anything was committed to the client."""

    status_code = 502
    default_error = "transfer_failed"
    default_message = "File transfer failed"


class TrackingFailedError(Exception):
    """Writing the audit trail failed. Non-fatal."""


class NotificationFailedError(Exception):
    """An activity log entry or an operator email could not be delivered. Non-fatal."""


__all__ = [
    "CatalogueAccessError",
    "NotFoundError",
    "ValidationFailedError",
    "TransferFailedError",
    "TrackingFailedError",
    "NotificationFailedError",
]
