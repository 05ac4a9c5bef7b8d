from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase

from common.exceptions import DeviceNotFound
from eld_devices.models import Driver, EldDevice, LocationPing, Vehicle, VehicleAssignment
from eld_devices.services import DeviceResolverService
from eld_devices.tests.helpers import create_fleet


class DeviceResolverServiceTests(TestCase):
    def setUp(self):
        self.resolver = DeviceResolverService()

    def test_resolves_driver_from_active_assignment(self):
        fleet = create_fleet()

        resolution = self.resolver.resolve("ELD-0001")

        self.assertEqual(resolution["device_id"], fleet.device.id)
        self.assertEqual(resolution["tenant_id"], fleet.tenant_id)
        self.assertEqual(resolution["vehicle_id"], fleet.vehicle.id)
        self.assertEqual(resolution["driver_id"], fleet.driver.id)
        self.assertEqual(resolution["assignment_id"], fleet.assignment.id)

    def test_unknown_serial_raises_device_not_found(self):
        with self.assertRaises(DeviceNotFound) as ctx:
            self.resolver.resolve("NOPE")

        self.assertEqual(ctx.exception.device_id, "NOPE")
        self.assertEqual(ctx.exception.http_status, 404)

    def test_device_without_vehicle_resolves_without_driver(self):
        create_fleet(with_vehicle=False)

        resolution = self.resolver.resolve("ELD-0001")

        self.assertIsNone(resolution["vehicle_id"])
        self.assertIsNone(resolution["driver_id"])

    def test_completed_assignment_is_ignored(self):
        fleet = create_fleet()
        fleet.assignment.status = VehicleAssignment.Status.COMPLETED
        fleet.assignment.save()

        resolution = self.resolver.resolve("ELD-0001")

        self.assertEqual(resolution["vehicle_id"], fleet.vehicle.id)
        self.assertIsNone(resolution["driver_id"])

    def test_most_recent_active_assignment_wins(self):
        fleet = create_fleet()
        fleet.assignment.assigned_at = datetime(2024, 1, 1, tzinfo=dt_timezone.utc)
        fleet.assignment.save()
        relief = Driver.objects.create(tenant_id=fleet.tenant_id, name="Relief Driver")
        VehicleAssignment.objects.create(
            tenant_id=fleet.tenant_id,
            driver=relief,
            vehicle=fleet.vehicle,
            assigned_at=fleet.assignment.assigned_at + timedelta(days=1),
        )

        resolution = self.resolver.resolve("ELD-0001")

        self.assertEqual(resolution["driver_id"], relief.id)

    def test_touch_device_updates_last_ping(self):
        fleet = create_fleet()
        seen_at = datetime(2024, 5, 1, 12, 0, tzinfo=dt_timezone.utc)

        self.resolver.touch_device(fleet.device.id, seen_at)

        fleet.device.refresh_from_db()
        self.assertEqual(fleet.device.last_ping, seen_at)

    def test_record_position_updates_vehicle_and_stores_ping(self):
        fleet = create_fleet()
        resolution = self.resolver.resolve("ELD-0001")
        recorded_at = datetime(2024, 5, 1, 12, 0, tzinfo=dt_timezone.utc)

        ping = self.resolver.record_position(
            resolution,
            latitude=41.8781136,
            longitude=-87.6297982,
            speed=55.5,
            engine_status="on",
            recorded_at=recorded_at,
            diagnostics={"fuel_level": 80},
        )

        vehicle = Vehicle.objects.get(id=fleet.vehicle.id)
        self.assertEqual(vehicle.latitude, Decimal("41.8781136"))
        self.assertEqual(vehicle.longitude, Decimal("-87.6297982"))
        self.assertIsNotNone(vehicle.last_located_at)
        self.assertEqual(ping.driver_id, fleet.driver.id)
        self.assertEqual(ping.speed, Decimal("55.50"))
        self.assertEqual(ping.diagnostics, {"fuel_level": 80})
        self.assertEqual(LocationPing.objects.count(), 1)

    def test_record_position_without_vehicle_is_noop(self):
        create_fleet(with_vehicle=False)
        resolution = self.resolver.resolve("ELD-0001")

        ping = self.resolver.record_position(
            resolution,
            latitude=10.0,
            longitude=10.0,
            speed=0,
            engine_status="off",
            recorded_at=datetime(2024, 5, 1, tzinfo=dt_timezone.utc),
        )

        self.assertIsNone(ping)
        self.assertFalse(LocationPing.objects.exists())
        self.assertTrue(EldDevice.objects.filter(device_serial="ELD-0001").exists())
