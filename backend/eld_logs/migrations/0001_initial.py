import django.db.models.deletion
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("eld_devices", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DutyStatusInterval",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for the interval", primary_key=True, serialize=False)),
                ("tenant_id", models.UUIDField(help_text="Tenant this interval belongs to")),
                ("status", models.CharField(choices=[("driving", "Driving"), ("on_duty", "On Duty (Not Driving)"), ("off_duty", "Off Duty"), ("sleeping", "Sleeper Berth")], help_text="Duty status for this time period", max_length=20)),
                ("start_time", models.DateTimeField(help_text="When this duty status period started")),
                ("end_time", models.DateTimeField(blank=True, help_text="When this duty status period ended", null=True)),
                ("duration_minutes", models.PositiveIntegerField(blank=True, help_text="Duration in minutes, set when the interval is closed", null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="When this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="When this record was last updated")),
                ("device", models.ForeignKey(help_text="Device that reported the status change", on_delete=django.db.models.deletion.PROTECT, related_name="duty_status_intervals", to="eld_devices.elddevice")),
                ("driver", models.ForeignKey(help_text="Driver this interval belongs to", on_delete=django.db.models.deletion.PROTECT, related_name="duty_status_intervals", to="eld_devices.driver")),
                ("vehicle", models.ForeignKey(help_text="Vehicle the driver was operating", on_delete=django.db.models.deletion.PROTECT, related_name="duty_status_intervals", to="eld_devices.vehicle")),
            ],
            options={
                "verbose_name": "Duty Status Interval",
                "verbose_name_plural": "Duty Status Intervals",
                "db_table": "eld_logs_dutystatusinterval",
                "ordering": ["-start_time"],
                "indexes": [
                    models.Index(fields=["driver", "start_time"], name="eld_int_driver_start_idx"),
                    models.Index(fields=["tenant_id", "start_time"], name="eld_int_tenant_start_idx"),
                    models.Index(fields=["status"], name="eld_int_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("end_time__isnull", True)), fields=("driver",), name="eld_logs_one_open_interval_per_driver"),
                    models.CheckConstraint(condition=models.Q(models.Q(("duration_minutes__isnull", True), ("end_time__isnull", True)), models.Q(("duration_minutes__gte", 0), ("end_time__isnull", False)), _connector="OR"), name="eld_logs_duration_iff_closed"),
                    models.CheckConstraint(condition=models.Q(("end_time__isnull", True), ("end_time__gte", models.F("start_time")), _connector="OR"), name="eld_logs_end_not_before_start"),
                ],
            },
        ),
    ]
