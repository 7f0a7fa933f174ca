"""
Error types for the Inventory service.

Each error carries a machine-readable kind and the HTTP status it maps to.
Messages are safe to return to callers; internal details are only logged.
"""


class AlertsError(Exception):
    """Base class for errors surfaced to API callers."""
    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AlertsError):
    """A referenced entity (e.g. a company) does not exist."""
    kind = "not_found"
    status_code = 404


class ValidationError(AlertsError):
    """The request is malformed."""
    kind = "validation_error"
    status_code = 400


class DependencyFailure(AlertsError):
    """A data-access lookup failed."""
    kind = "dependency_failure"
    status_code = 503
