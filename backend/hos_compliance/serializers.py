"""
HOS Compliance API Serializers.

Provides response serialization for the driver compliance summary and
tenant analytics endpoints. The services return plain dicts; these
serializers fix the wire shape and format datetimes.
"""

from rest_framework import serializers

from eld_logs.models import DutyStatus
from .services.violation_detector import ViolationType


class ViolationSerializer(serializers.Serializer):
    """
    Serializer for a detected HOS violation.

    Violations are derived on every read and are not persisted.
    """

    type = serializers.ChoiceField(choices=ViolationType.choices)
    description = serializers.CharField()
    timestamp = serializers.DateTimeField(
        help_text="Evaluation time at which the violation was detected"
    )
    minutes = serializers.IntegerField()
    limit_minutes = serializers.IntegerField()


class ComplianceSummarySerializer(serializers.Serializer):
    """
    Serializer for a driver's compliance summary.

    Formats ComplianceSummaryService output for API response.
    """

    driver_id = serializers.UUIDField()
    driver_name = serializers.CharField()
    current_status = serializers.ChoiceField(choices=DutyStatus.choices)
    current_status_start_time = serializers.DateTimeField()
    on_break = serializers.BooleanField()
    total_driving_minutes = serializers.IntegerField()
    total_on_duty_minutes = serializers.IntegerField()
    total_off_duty_minutes = serializers.IntegerField()
    total_sleeping_minutes = serializers.IntegerField()
    remaining_drive_time_minutes = serializers.IntegerField(min_value=0)
    remaining_duty_time_minutes = serializers.IntegerField(min_value=0)
    drive_time_balance_minutes = serializers.IntegerField(
        help_text="Unclamped; negative once the driving limit is exceeded"
    )
    duty_time_balance_minutes = serializers.IntegerField(
        help_text="Unclamped; negative once the on-duty limit is exceeded"
    )
    cycle_on_duty_minutes = serializers.IntegerField()
    remaining_cycle_time_minutes = serializers.IntegerField(min_value=0)
    cycle_time_balance_minutes = serializers.IntegerField(
        help_text="Unclamped; negative once the cycle limit is exceeded"
    )
    violations = ViolationSerializer(many=True)
    window_start = serializers.DateTimeField()
    evaluated_at = serializers.DateTimeField()


class DriverDutyTotalsSerializer(serializers.Serializer):
    """Per-driver duty minutes for tenant analytics."""

    driver_id = serializers.UUIDField()
    driver_name = serializers.CharField(allow_null=True)
    total_driving_minutes = serializers.IntegerField()
    total_on_duty_minutes = serializers.IntegerField()
    total_off_duty_minutes = serializers.IntegerField()
    total_sleeping_minutes = serializers.IntegerField()
    violations = serializers.DictField(
        child=serializers.IntegerField(),
        help_text="Over-limit interval counts for this driver by violation type"
    )


class TenantAnalyticsSerializer(serializers.Serializer):
    """
    Serializer for tenant HOS analytics.

    Formats FleetAnalyticsService output for API response.
    """

    tenant_id = serializers.UUIDField()
    window_start = serializers.DateTimeField()
    window_end = serializers.DateTimeField()
    drivers = DriverDutyTotalsSerializer(many=True)
    violations = serializers.DictField(
        child=serializers.IntegerField(),
        help_text="Count of individual intervals exceeding each limit",
    )
    summary = serializers.DictField(child=serializers.IntegerField())
