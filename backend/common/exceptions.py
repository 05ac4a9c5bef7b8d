"""
Telemetry processing exceptions.

Validation and not-found errors are terminal: they are raised before any
write and the caller must fix the request. Concurrency and storage errors
are transient: the interval state machine retries them a bounded number
of times before letting them surface.
"""


class TelemetryError(Exception):
    """Base class for errors raised while processing telemetry."""

    error_code = "TelemetryError"
    http_status = 500
    retryable = False

    def __init__(self, message, details=None, device_id=None, driver_id=None, timestamp=None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.device_id = device_id
        self.driver_id = driver_id
        self.timestamp = timestamp

    def to_response(self):
        """Error body returned to API callers."""
        body = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidTelemetry(TelemetryError):
    """Telemetry record is missing fields or has malformed values."""

    error_code = "InvalidTelemetry"
    http_status = 400


class DeviceNotFound(TelemetryError):
    """Device identifier does not match any registered ELD device."""

    error_code = "DeviceNotFound"
    http_status = 404


class ConcurrencyConflict(TelemetryError):
    """A concurrent writer changed the driver's open interval mid-transition."""

    error_code = "ConcurrencyConflict"
    http_status = 503
    retryable = True


class StorageError(TelemetryError):
    """Transient persistence failure."""

    error_code = "StorageError"
    http_status = 503
    retryable = True


class ImmutableIntervalError(Exception):
    """Raised on an attempt to modify a closed duty status interval."""

    pass
