"""
Duty Status Interval model for HOS tracking.

Contains the DutyStatusInterval model: one contiguous period a driver
spent in one duty status. Intervals form an append-only, gap-free
timeline per driver and are written exclusively by the
IntervalManagerService.
"""

import uuid
from django.db import models
from django.db.models import F, Q

from common.exceptions import ImmutableIntervalError
from common.validators import calculate_duration_minutes


class DutyStatus(models.TextChoices):
    """The four duty statuses recorded by an ELD."""

    DRIVING = "driving", "Driving"
    ON_DUTY = "on_duty", "On Duty (Not Driving)"
    OFF_DUTY = "off_duty", "Off Duty"
    SLEEPING = "sleeping", "Sleeper Berth"


REST_STATUSES = (DutyStatus.OFF_DUTY, DutyStatus.SLEEPING)


class DutyStatusInterval(models.Model):
    """
    A single contiguous span of one duty status for one driver.

    For a given driver at most one interval is open (end_time is null),
    and consecutive intervals share a boundary: the end of one is the
    start of the next. Once closed an interval is never modified.

    Attributes:
        id: UUID primary key
        driver: Driver the interval belongs to
        vehicle: Vehicle the driver was assigned to
        device: ELD device that reported the status
        tenant_id: Owning tenant
        status: Duty status for this span
        start_time: Device timestamp at which the status began
        end_time: Device timestamp at which the status ended (null while open)
        duration_minutes: Rounded length in minutes (present iff closed)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the interval",
    )

    driver = models.ForeignKey(
        "eld_devices.Driver",
        on_delete=models.PROTECT,
        related_name="duty_status_intervals",
        help_text="Driver this interval belongs to",
    )

    vehicle = models.ForeignKey(
        "eld_devices.Vehicle",
        on_delete=models.PROTECT,
        related_name="duty_status_intervals",
        help_text="Vehicle the driver was operating",
    )

    device = models.ForeignKey(
        "eld_devices.EldDevice",
        on_delete=models.PROTECT,
        related_name="duty_status_intervals",
        help_text="Device that reported the status change",
    )

    tenant_id = models.UUIDField(help_text="Tenant this interval belongs to")

    status = models.CharField(
        max_length=20,
        choices=DutyStatus.choices,
        help_text="Duty status for this time period",
    )

    start_time = models.DateTimeField(help_text="When this duty status period started")

    end_time = models.DateTimeField(
        null=True, blank=True, help_text="When this duty status period ended"
    )

    duration_minutes = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Duration in minutes, set when the interval is closed",
    )

    created_at = models.DateTimeField(
        auto_now_add=True, help_text="When this record was created"
    )
    updated_at = models.DateTimeField(
        auto_now=True, help_text="When this record was last updated"
    )

    class Meta:
        db_table = "eld_logs_dutystatusinterval"
        ordering = ["-start_time"]
        verbose_name = "Duty Status Interval"
        verbose_name_plural = "Duty Status Intervals"
        constraints = [
            models.UniqueConstraint(
                fields=["driver"],
                condition=Q(end_time__isnull=True),
                name="eld_logs_one_open_interval_per_driver",
            ),
            models.CheckConstraint(
                condition=Q(end_time__isnull=True, duration_minutes__isnull=True)
                | Q(end_time__isnull=False, duration_minutes__gte=0),
                name="eld_logs_duration_iff_closed",
            ),
            models.CheckConstraint(
                condition=Q(end_time__isnull=True) | Q(end_time__gte=F("start_time")),
                name="eld_logs_end_not_before_start",
            ),
        ]
        indexes = [
            models.Index(fields=["driver", "start_time"], name="eld_int_driver_start_idx"),
            models.Index(fields=["tenant_id", "start_time"], name="eld_int_tenant_start_idx"),
            models.Index(fields=["status"], name="eld_int_status_idx"),
        ]

    def __str__(self):
        """Return string representation of the interval."""
        return f"{self.get_status_display()} from {self.start_time.isoformat()} ({self.get_time_range_display()})"

    def save(self, *args, **kwargs):
        """Refuse to rewrite closed history and keep duration in step with end_time."""
        if not self._state.adding:
            stored_end = (
                type(self).objects.filter(pk=self.pk)
                .values_list("end_time", flat=True)
                .first()
            )
            if stored_end is not None:
                raise ImmutableIntervalError(f"Interval {self.pk} is closed and cannot be modified")

        if self.end_time is not None:
            self.duration_minutes = calculate_duration_minutes(self.start_time, self.end_time)
        else:
            self.duration_minutes = None

        super().save(*args, **kwargs)

    @property
    def is_open(self):
        return self.end_time is None

    @property
    def duration_hours(self):
        """Return duration in hours, or None while open."""
        if self.duration_minutes is None:
            return None
        return round(self.duration_minutes / 60, 2)

    def is_driving_record(self):
        """Check if this is a driving interval."""
        return self.status == DutyStatus.DRIVING

    def is_rest_record(self):
        """Check if this is a rest/off-duty interval."""
        return self.status in REST_STATUSES

    def get_time_range_display(self):
        """Get formatted time range for display."""
        start = self.start_time.strftime("%H:%M")
        if self.end_time:
            end = self.end_time.strftime("%H:%M")
            return f"{start} - {end}"
        return f"{start} - ongoing"
