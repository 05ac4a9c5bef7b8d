"""
Common validators and utilities for the HOS tracking service.

This module contains shared validation logic and utility functions used
across multiple Django apps.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from django.core.validators import BaseValidator

COORDINATE_QUANTUM = Decimal("0.0000001")
MILLISECONDS_PER_MINUTE = Decimal("60000")


class GPSCoordinateValidator(BaseValidator):
    """
    Validator for GPS coordinates (latitude/longitude).

    Ensures coordinates are within valid ranges:
    - Latitude: -90 to 90 degrees
    - Longitude: -180 to 180 degrees
    """

    def __init__(self, coordinate_type="latitude"):
        self.coordinate_type = coordinate_type

        if coordinate_type == "latitude":
            self.limit_value = (-90, 90)
            self.message = "Latitude must be between -90 and 90 degrees."
        elif coordinate_type == "longitude":
            self.limit_value = (-180, 180)
            self.message = "Longitude must be between -180 and 180 degrees."
        else:
            raise ValueError("coordinate_type must be 'latitude' or 'longitude'")

    def compare(self, value, limit_value):
        min_val, max_val = limit_value
        return not (min_val <= value <= max_val)

    def clean(self, value):
        return float(value)


def validate_latitude(value):
    """Validate latitude coordinate."""
    validator = GPSCoordinateValidator("latitude")
    validator(value)


def validate_longitude(value):
    """Validate longitude coordinate."""
    validator = GPSCoordinateValidator("longitude")
    validator(value)


def to_coordinate_decimal(value):
    """Convert a float coordinate to the 7-place Decimal stored in the database."""
    return Decimal(str(value)).quantize(COORDINATE_QUANTUM, rounding=ROUND_HALF_UP)


def calculate_duration_minutes(start_time: datetime, end_time: datetime) -> int:
    """
    Whole minutes between two instants, rounded half up.

    Works at millisecond resolution so the stored duration is
    round((end - start) in ms / 60000). Raises ValueError when the
    end precedes the start.
    """
    delta = end_time - start_time
    milliseconds = (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000
    if milliseconds < 0:
        raise ValueError(
            f"End time {end_time.isoformat()} is before start time {start_time.isoformat()}"
        )

    minutes = (Decimal(milliseconds) / MILLISECONDS_PER_MINUTE).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    return int(minutes)
