"""
ELD Devices models package.

Contains the fleet directory read models (drivers, vehicles, assignments)
and the ELD device models used to resolve incoming telemetry.
"""

from .fleet import Driver, Vehicle, VehicleAssignment
from .eld_device import EldDevice, LocationPing

__all__ = ['Driver', 'Vehicle', 'VehicleAssignment', 'EldDevice', 'LocationPing']
