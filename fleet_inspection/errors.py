# fleet_inspection/errors.py
"""
Error taxonomy shared by services and the HTTP layer.
main.py maps each kind to its status_code; messages are shown to the caller as-is.
"""


class FleetError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FleetError):
    """Caller-supplied data fails a field or cross-field rule."""
    status_code = 400


class NotFoundError(FleetError):
    """A referenced id or token does not resolve."""
    status_code = 404


class ConflictError(FleetError):
    """Business-rule conflict: vehicle already in a set, inspection already submitted, duplicates."""
    status_code = 409


class StorageError(FleetError):
    """Database or file-system failure. Safe to retry the whole operation."""
    status_code = 503
    retryable = True
