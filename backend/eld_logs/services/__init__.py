"""
ELD Logs Services Package.

This package contains the business logic for turning ELD telemetry into a
driver's duty status timeline.

Services:
- IntervalManagerService: Duty status state machine (opens/closes intervals)
- TelemetryIngestorService: Validate, resolve and apply one telemetry record
"""

from .interval_manager import IntervalManagerService
from .telemetry_ingestor import TelemetryIngestorService

__all__ = [
    'IntervalManagerService',
    'TelemetryIngestorService',
]
