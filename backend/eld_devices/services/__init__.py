"""
ELD Devices Services Package.

Services:
- DeviceResolverService: Resolve telemetry device identifiers to driver/vehicle/tenant
"""

from .device_resolver import DeviceResolverService

__all__ = ['DeviceResolverService']
