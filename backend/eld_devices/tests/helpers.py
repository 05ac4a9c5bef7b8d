"""Fixture builders shared by the app test suites."""

import uuid
from types import SimpleNamespace

from eld_devices.models import Driver, EldDevice, Vehicle, VehicleAssignment


def create_fleet(
    device_serial="ELD-0001",
    tenant_id=None,
    driver_name="Jane Driver",
    with_vehicle=True,
    with_assignment=True,
):
    """
    Create a tenant's driver, vehicle, device and (optionally) an active
    assignment linking the driver to the vehicle.
    """
    tenant_id = tenant_id or uuid.uuid4()
    driver = Driver.objects.create(
        tenant_id=tenant_id, name=driver_name, email="driver@example.com"
    )
    vehicle = None
    assignment = None

    if with_vehicle:
        vehicle = Vehicle.objects.create(tenant_id=tenant_id, unit_number="T-100")
        if with_assignment:
            assignment = VehicleAssignment.objects.create(
                tenant_id=tenant_id,
                driver=driver,
                vehicle=vehicle,
                status=VehicleAssignment.Status.IN_PROGRESS,
            )

    device = EldDevice.objects.create(
        tenant_id=tenant_id,
        device_serial=device_serial,
        vehicle=vehicle,
        status=EldDevice.Status.ACTIVE,
    )

    return SimpleNamespace(
        tenant_id=tenant_id,
        driver=driver,
        vehicle=vehicle,
        device=device,
        assignment=assignment,
    )
