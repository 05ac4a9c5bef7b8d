import common.validators
import django.db.models.deletion
import django.utils.timezone
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Driver",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for the driver", primary_key=True, serialize=False)),
                ("tenant_id", models.UUIDField(db_index=True, help_text="Tenant this driver belongs to")),
                ("name", models.CharField(help_text="Driver's full name", max_length=200)),
                ("email", models.EmailField(blank=True, help_text="Driver's contact email", max_length=254)),
                ("is_active", models.BooleanField(default=True, help_text="Whether the driver is active")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Driver",
                "verbose_name_plural": "Drivers",
                "db_table": "eld_devices_driver",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Vehicle",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for the vehicle", primary_key=True, serialize=False)),
                ("tenant_id", models.UUIDField(db_index=True, help_text="Tenant this vehicle belongs to")),
                ("unit_number", models.CharField(help_text="Fleet unit number painted on the truck", max_length=50)),
                ("latitude", models.DecimalField(blank=True, decimal_places=7, help_text="Last known latitude (-90 to 90)", max_digits=10, null=True)),
                ("longitude", models.DecimalField(blank=True, decimal_places=7, help_text="Last known longitude (-180 to 180)", max_digits=10, null=True)),
                ("last_located_at", models.DateTimeField(blank=True, help_text="When the position was last updated", null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Vehicle",
                "verbose_name_plural": "Vehicles",
                "db_table": "eld_devices_vehicle",
                "ordering": ["unit_number"],
            },
        ),
        migrations.CreateModel(
            name="EldDevice",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for the device", primary_key=True, serialize=False)),
                ("device_serial", models.CharField(help_text="Serial number reported by the device in telemetry", max_length=100, unique=True)),
                ("tenant_id", models.UUIDField(db_index=True, help_text="Tenant this device belongs to")),
                ("status", models.CharField(choices=[("active", "Active"), ("inactive", "Inactive"), ("maintenance", "Maintenance")], default="inactive", help_text="Registration status of the device", max_length=20)),
                ("last_ping", models.DateTimeField(blank=True, help_text="When telemetry was last received", null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("vehicle", models.ForeignKey(blank=True, help_text="Vehicle the device is installed in", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="eld_devices", to="eld_devices.vehicle")),
            ],
            options={
                "verbose_name": "ELD Device",
                "verbose_name_plural": "ELD Devices",
                "db_table": "eld_devices_elddevice",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="VehicleAssignment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for the assignment", primary_key=True, serialize=False)),
                ("tenant_id", models.UUIDField(db_index=True)),
                ("status", models.CharField(choices=[("assigned", "Assigned"), ("in_progress", "In Progress"), ("completed", "Completed"), ("cancelled", "Cancelled")], default="assigned", help_text="Assignment status", max_length=20)),
                ("assigned_at", models.DateTimeField(default=django.utils.timezone.now, help_text="When the driver was assigned")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("driver", models.ForeignKey(help_text="Assigned driver", on_delete=django.db.models.deletion.CASCADE, related_name="vehicle_assignments", to="eld_devices.driver")),
                ("vehicle", models.ForeignKey(help_text="Assigned vehicle", on_delete=django.db.models.deletion.CASCADE, related_name="assignments", to="eld_devices.vehicle")),
            ],
            options={
                "verbose_name": "Vehicle Assignment",
                "verbose_name_plural": "Vehicle Assignments",
                "db_table": "eld_devices_vehicleassignment",
                "ordering": ["-assigned_at"],
                "indexes": [models.Index(fields=["vehicle", "status"], name="eld_assign_vehicle_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="LocationPing",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("tenant_id", models.UUIDField(db_index=True)),
                ("latitude", models.DecimalField(decimal_places=7, max_digits=10, validators=[common.validators.validate_latitude])),
                ("longitude", models.DecimalField(decimal_places=7, max_digits=10, validators=[common.validators.validate_longitude])),
                ("speed", models.DecimalField(decimal_places=2, help_text="Reported speed", max_digits=6)),
                ("engine_status", models.CharField(choices=[("on", "On"), ("off", "Off")], max_length=3)),
                ("recorded_at", models.DateTimeField(help_text="Device timestamp of the telemetry")),
                ("diagnostics", models.JSONField(blank=True, default=dict, help_text="Free-form diagnostic payload")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("assignment", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="location_pings", to="eld_devices.vehicleassignment")),
                ("device", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="location_pings", to="eld_devices.elddevice")),
                ("driver", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="location_pings", to="eld_devices.driver")),
                ("vehicle", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="location_pings", to="eld_devices.vehicle")),
            ],
            options={
                "verbose_name": "Location Ping",
                "verbose_name_plural": "Location Pings",
                "db_table": "eld_devices_locationping",
                "ordering": ["-recorded_at"],
                "indexes": [models.Index(fields=["vehicle", "recorded_at"], name="eld_ping_vehicle_time_idx")],
            },
        ),
    ]
