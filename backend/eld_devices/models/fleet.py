"""
Fleet directory models.

Contains the Driver, Vehicle and VehicleAssignment models. These are the
minimal read models of the driver/vehicle directory that telemetry
resolution and compliance summaries depend on.
"""

import uuid
from django.db import models
from django.utils import timezone


class Driver(models.Model):
    """
    Commercial driver known to a tenant.

    Attributes:
        id: UUID primary key
        tenant_id: Tenant the driver belongs to
        name: Driver's display name
        email: Contact email
        is_active: Whether the driver is currently employed/active
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the driver",
    )

    tenant_id = models.UUIDField(
        db_index=True, help_text="Tenant this driver belongs to"
    )

    name = models.CharField(max_length=200, help_text="Driver's full name")

    email = models.EmailField(blank=True, help_text="Driver's contact email")

    is_active = models.BooleanField(
        default=True, help_text="Whether the driver is active"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "eld_devices_driver"
        ordering = ["name"]
        verbose_name = "Driver"
        verbose_name_plural = "Drivers"

    def __str__(self):
        return self.name


class Vehicle(models.Model):
    """
    Vehicle with its last known position.

    The position columns are upserted from telemetry of any device
    linked to the vehicle.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the vehicle",
    )

    tenant_id = models.UUIDField(
        db_index=True, help_text="Tenant this vehicle belongs to"
    )

    unit_number = models.CharField(
        max_length=50, help_text="Fleet unit number painted on the truck"
    )

    latitude = models.DecimalField(
        max_digits=10,
        decimal_places=7,
        null=True,
        blank=True,
        help_text="Last known latitude (-90 to 90)",
    )

    longitude = models.DecimalField(
        max_digits=10,
        decimal_places=7,
        null=True,
        blank=True,
        help_text="Last known longitude (-180 to 180)",
    )

    last_located_at = models.DateTimeField(
        null=True, blank=True, help_text="When the position was last updated"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "eld_devices_vehicle"
        ordering = ["unit_number"]
        verbose_name = "Vehicle"
        verbose_name_plural = "Vehicles"

    def __str__(self):
        return f"Unit {self.unit_number}"

    def get_active_assignment(self):
        """Return the most recent assigned/in-progress assignment, or None."""
        return (
            self.assignments.filter(status__in=VehicleAssignment.ACTIVE_STATUSES)
            .order_by("-assigned_at")
            .first()
        )


class VehicleAssignment(models.Model):
    """
    A driver's assignment to a vehicle (one dispatched job).

    Telemetry from a vehicle's device is attributed to the driver holding
    the vehicle's active assignment.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the assignment",
    )

    tenant_id = models.UUIDField(db_index=True)

    driver = models.ForeignKey(
        Driver,
        on_delete=models.CASCADE,
        related_name="vehicle_assignments",
        help_text="Assigned driver",
    )

    vehicle = models.ForeignKey(
        Vehicle,
        on_delete=models.CASCADE,
        related_name="assignments",
        help_text="Assigned vehicle",
    )

    class Status(models.TextChoices):
        ASSIGNED = "assigned", "Assigned"
        IN_PROGRESS = "in_progress", "In Progress"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    ACTIVE_STATUSES = [Status.ASSIGNED, Status.IN_PROGRESS]

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ASSIGNED,
        help_text="Assignment status",
    )

    assigned_at = models.DateTimeField(
        default=timezone.now, help_text="When the driver was assigned"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "eld_devices_vehicleassignment"
        ordering = ["-assigned_at"]
        verbose_name = "Vehicle Assignment"
        verbose_name_plural = "Vehicle Assignments"
        indexes = [
            models.Index(fields=["vehicle", "status"], name="eld_assign_vehicle_status_idx"),
        ]

    def __str__(self):
        return f"{self.driver} on {self.vehicle} ({self.get_status_display()})"

    @property
    def is_active(self):
        return self.status in self.ACTIVE_STATUSES
