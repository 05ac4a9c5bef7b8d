"""
Device Resolver Service.

Maps the device identifier carried by a telemetry record to the device,
vehicle, tenant and driver it belongs to, and performs the simple
"last seen" upserts that accompany every accepted record.

Single Responsibility: device lookup and device/vehicle bookkeeping only.
The duty status state machine lives in eld_logs.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional
from django.utils import timezone

from common.exceptions import DeviceNotFound
from common.validators import to_coordinate_decimal
from ..models import EldDevice, LocationPing, Vehicle

logger = logging.getLogger(__name__)


class DeviceResolverService:
    """
    Service for resolving telemetry devices to drivers and vehicles.

    A device resolves fully when it is installed in a vehicle that has an
    active driver assignment. Devices without a vehicle, or vehicles
    without an active assignment, resolve with no driver.
    """

    def __init__(self):
        """Initialize device resolver."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def resolve(self, device_identifier: str) -> Dict:
        """
        Resolve a device identifier.

        Args:
            device_identifier: Serial the device reports in telemetry

        Returns:
            Dict with device_id, device_serial, tenant_id, vehicle_id,
            driver_id and assignment_id (the last three may be None)

        Raises:
            DeviceNotFound: If no device is registered under the identifier
        """
        device = (
            EldDevice.objects.select_related("vehicle")
            .filter(device_serial=device_identifier)
            .first()
        )
        if device is None:
            raise DeviceNotFound(
                f"ELD device '{device_identifier}' not found",
                device_id=device_identifier,
            )

        resolution = {
            "device_id": device.id,
            "device_serial": device.device_serial,
            "tenant_id": device.tenant_id,
            "vehicle_id": device.vehicle_id,
            "driver_id": None,
            "assignment_id": None,
        }

        if device.vehicle is not None:
            assignment = device.vehicle.get_active_assignment()
            if assignment is not None:
                resolution["driver_id"] = assignment.driver_id
                resolution["assignment_id"] = assignment.id

        self.logger.debug(
            f"Resolved device {device_identifier}: vehicle={resolution['vehicle_id']} "
            f"driver={resolution['driver_id']}"
        )
        return resolution

    def touch_device(self, device_id, seen_at: Optional[datetime] = None) -> None:
        """Upsert the device's last-seen time."""
        seen_at = seen_at or timezone.now()
        EldDevice.objects.filter(id=device_id).update(last_ping=seen_at, updated_at=seen_at)

    def record_position(
        self,
        resolution: Dict,
        latitude: float,
        longitude: float,
        speed: float,
        engine_status: str,
        recorded_at: datetime,
        diagnostics: Optional[Dict] = None,
    ) -> Optional[LocationPing]:
        """
        Update the vehicle's last known position and store a breadcrumb.

        No-op for devices that are not linked to a vehicle.

        Returns:
            The created LocationPing, or None if the device has no vehicle
        """
        vehicle_id = resolution.get("vehicle_id")
        if vehicle_id is None:
            return None

        lat = to_coordinate_decimal(latitude)
        lon = to_coordinate_decimal(longitude)
        now = timezone.now()

        Vehicle.objects.filter(id=vehicle_id).update(
            latitude=lat, longitude=lon, last_located_at=now, updated_at=now
        )

        ping = LocationPing.objects.create(
            tenant_id=resolution["tenant_id"],
            device_id=resolution["device_id"],
            vehicle_id=vehicle_id,
            driver_id=resolution.get("driver_id"),
            assignment_id=resolution.get("assignment_id"),
            latitude=lat,
            longitude=lon,
            speed=Decimal(str(speed)).quantize(Decimal("0.01")),
            engine_status=engine_status,
            recorded_at=recorded_at,
            diagnostics=diagnostics or {},
        )
        return ping
