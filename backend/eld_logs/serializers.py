"""
ELD Logs API Serializers.

Provides serialization and validation for ELD logs API endpoints:
inbound telemetry records, duty status interval responses and interval
query parameters.
"""

import math
from rest_framework import serializers

from common.validators import validate_latitude, validate_longitude
from eld_devices.models import LocationPing
from .models import DutyStatus, DutyStatusInterval


class StrictFloatField(serializers.FloatField):
    """
    FloatField that only accepts JSON numbers.

    Rejects strings, booleans and non-finite values, which the stock
    FloatField would coerce.
    """

    default_error_messages = {
        "invalid": "A valid number is required.",
    }

    def to_internal_value(self, data):
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            self.fail("invalid")
        value = super().to_internal_value(data)
        if not math.isfinite(value):
            self.fail("invalid")
        return value


class TelemetrySerializer(serializers.Serializer):
    """
    Serializer for one normalized ELD telemetry record.

    Validates the inbound record before any lookup or write happens.
    """

    device_id = serializers.CharField(
        max_length=100,
        help_text="Serial number the device reports",
    )

    timestamp = serializers.DateTimeField(
        help_text="Device timestamp (ISO-8601); naive values are read as UTC"
    )

    latitude = StrictFloatField(validators=[validate_latitude])

    longitude = StrictFloatField(validators=[validate_longitude])

    speed = StrictFloatField(min_value=0, max_value=9999)

    engine_status = serializers.ChoiceField(choices=LocationPing.EngineStatus.choices)

    duty_status = serializers.ChoiceField(choices=DutyStatus.choices)

    diagnostics = serializers.DictField(
        required=False,
        allow_empty=True,
        help_text="Optional free-form diagnostic payload",
    )


class DutyStatusIntervalSerializer(serializers.ModelSerializer):
    """
    Serializer for DutyStatusInterval model.

    Read-only representation of one interval of a driver's timeline.
    """

    driver_id = serializers.UUIDField(read_only=True)
    vehicle_id = serializers.UUIDField(read_only=True)
    device_id = serializers.UUIDField(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    duration_hours = serializers.FloatField(read_only=True)
    is_open = serializers.BooleanField(read_only=True)

    class Meta:
        model = DutyStatusInterval
        fields = [
            "id",
            "driver_id",
            "vehicle_id",
            "device_id",
            "tenant_id",
            "status",
            "status_display",
            "start_time",
            "end_time",
            "duration_minutes",
            "duration_hours",
            "is_open",
        ]
        read_only_fields = fields


class IntervalQuerySerializer(serializers.Serializer):
    """Validates the optional date bounds of an interval query."""

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, data):
        """Validate date range."""
        start_date = data.get("start_date")
        end_date = data.get("end_date")

        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError({
                "end_date": "End date cannot be before start date"
            })

        return data


class TelemetryIngestResponseSerializer(serializers.Serializer):
    """Formats the ingestion result for the API response."""

    message = serializers.CharField()
    timestamp = serializers.DateTimeField()
    processed_at = serializers.DateTimeField()
    interval_action = serializers.CharField()
    interval_id = serializers.UUIDField(allow_null=True)
