"""Error taxonomy shared by the lookup and admin flows.

All three are caught at the HTTP boundary and turned into a notice; nothing
is retried automatically.
"""

class TrackingError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class ValidationError(TrackingError):
    """Missing or blank required input, raised before any store access."""
    status_code = 422

    def __init__(self, message: str, fields=None):
        super().__init__(message)
        self.fields = list(fields or [])

class StoreError(TrackingError):
    """Store read/write failure."""
    status_code = 503

class NotFoundError(TrackingError):
    status_code = 404
