"""
ELD Device model.

Contains the EldDevice model representing an in-vehicle electronic
logging device, and the LocationPing breadcrumb written for every
accepted telemetry record of a vehicle-linked device.
"""

import uuid
from django.db import models

from common.validators import validate_latitude, validate_longitude


class EldDevice(models.Model):
    """
    Electronic Logging Device installed in a vehicle.

    Attributes:
        id: UUID primary key
        device_serial: Identifier the device reports in its telemetry
        tenant_id: Owning tenant
        vehicle: Vehicle the device is installed in (optional)
        status: Registration status (active, inactive, maintenance)
        last_ping: When telemetry was last received from the device
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the device",
    )

    device_serial = models.CharField(
        max_length=100,
        unique=True,
        help_text="Serial number reported by the device in telemetry",
    )

    tenant_id = models.UUIDField(
        db_index=True, help_text="Tenant this device belongs to"
    )

    vehicle = models.ForeignKey(
        "eld_devices.Vehicle",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="eld_devices",
        help_text="Vehicle the device is installed in",
    )

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"
        MAINTENANCE = "maintenance", "Maintenance"

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.INACTIVE,
        help_text="Registration status of the device",
    )

    last_ping = models.DateTimeField(
        null=True, blank=True, help_text="When telemetry was last received"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "eld_devices_elddevice"
        ordering = ["-created_at"]
        verbose_name = "ELD Device"
        verbose_name_plural = "ELD Devices"

    def __str__(self):
        return f"ELD {self.device_serial}"


class LocationPing(models.Model):
    """
    Position breadcrumb from one telemetry record.

    Written only for devices linked to a vehicle. The driver and
    assignment are filled in when the vehicle had an active assignment
    at ingestion time.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant_id = models.UUIDField(db_index=True)

    device = models.ForeignKey(
        EldDevice, on_delete=models.CASCADE, related_name="location_pings"
    )

    vehicle = models.ForeignKey(
        "eld_devices.Vehicle", on_delete=models.CASCADE, related_name="location_pings"
    )

    driver = models.ForeignKey(
        "eld_devices.Driver",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="location_pings",
    )

    assignment = models.ForeignKey(
        "eld_devices.VehicleAssignment",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="location_pings",
    )

    latitude = models.DecimalField(
        max_digits=10, decimal_places=7, validators=[validate_latitude]
    )

    longitude = models.DecimalField(
        max_digits=10, decimal_places=7, validators=[validate_longitude]
    )

    speed = models.DecimalField(
        max_digits=6, decimal_places=2, help_text="Reported speed"
    )

    class EngineStatus(models.TextChoices):
        ON = "on", "On"
        OFF = "off", "Off"

    engine_status = models.CharField(max_length=3, choices=EngineStatus.choices)

    recorded_at = models.DateTimeField(help_text="Device timestamp of the telemetry")

    diagnostics = models.JSONField(
        default=dict, blank=True, help_text="Free-form diagnostic payload"
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "eld_devices_locationping"
        ordering = ["-recorded_at"]
        verbose_name = "Location Ping"
        verbose_name_plural = "Location Pings"
        indexes = [
            models.Index(fields=["vehicle", "recorded_at"], name="eld_ping_vehicle_time_idx"),
        ]

    def __str__(self):
        return f"{self.vehicle} @ {self.recorded_at.isoformat()}"
