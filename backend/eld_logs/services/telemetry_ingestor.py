"""
Telemetry Ingestor Service.

Entry point for telemetry emitted by in-vehicle logging devices.
Validates and normalizes one record, resolves the reporting device, keeps
device/vehicle "last seen" data current and hands the reported duty
status to the interval state machine.

Validation and resolution failures happen before any write. Every
rejected or skipped record is written to the audit log with the device,
driver and telemetry timestamp so that compliance reviews can reconstruct
what was received and what happened to it.

Single Responsibility: telemetry intake and orchestration only.
"""

import logging
from typing import Dict, Optional
from django.utils import timezone

from common.exceptions import DeviceNotFound, InvalidTelemetry, TelemetryError
from eld_devices.services import DeviceResolverService
from ..serializers import TelemetrySerializer
from .interval_manager import IntervalManagerService

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("eld_logs.audit")


class TelemetryIngestorService:
    """
    Service for processing inbound ELD telemetry.

    Orchestrates validation, device resolution, last-seen upserts and
    the duty status transition for a single record.
    """

    SKIPPED = "skipped"

    def __init__(
        self,
        resolver: Optional[DeviceResolverService] = None,
        interval_manager: Optional[IntervalManagerService] = None,
    ):
        """Initialize ingestor with its collaborators."""
        self.resolver = resolver or DeviceResolverService()
        self.interval_manager = interval_manager or IntervalManagerService()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def validate(self, payload) -> Dict:
        """
        Validate and normalize a raw telemetry payload.

        Returns:
            Dict of validated fields (timestamp as an aware datetime)

        Raises:
            InvalidTelemetry: If required fields are missing or malformed
        """
        serializer = TelemetrySerializer(data=payload)
        if not serializer.is_valid():
            device_id = payload.get("device_id") if isinstance(payload, dict) else None
            timestamp = payload.get("timestamp") if isinstance(payload, dict) else None
            audit_logger.warning(
                f"Rejected invalid telemetry device={device_id} driver=unresolved "
                f"telemetry_ts={timestamp} errors={dict(serializer.errors)}"
            )
            raise InvalidTelemetry(
                "Telemetry record is invalid",
                details=serializer.errors,
                device_id=device_id,
                timestamp=timestamp,
            )
        return dict(serializer.validated_data)

    def ingest(self, payload) -> Dict:
        """
        Process one telemetry record end to end.

        Args:
            payload: Raw telemetry object (device_id, timestamp, latitude,
                longitude, speed, engine_status, duty_status, diagnostics?)

        Returns:
            Dict containing message, timestamp (processed device timestamp),
            processed_at, interval_action and interval_id

        Raises:
            InvalidTelemetry: Malformed record, nothing written
            DeviceNotFound: Unknown device, nothing written
            ConcurrencyConflict / StorageError: Transition failed after retries
        """
        record = self.validate(payload)
        device_identifier = record["device_id"]
        timestamp = record["timestamp"]

        try:
            resolution = self.resolver.resolve(device_identifier)
        except DeviceNotFound as e:
            e.timestamp = timestamp
            audit_logger.warning(
                f"Rejected telemetry from unknown device={device_identifier} "
                f"driver=unresolved telemetry_ts={timestamp.isoformat()}"
            )
            raise

        self.resolver.touch_device(resolution["device_id"])
        self.resolver.record_position(
            resolution,
            latitude=record["latitude"],
            longitude=record["longitude"],
            speed=record["speed"],
            engine_status=record["engine_status"],
            recorded_at=timestamp,
            diagnostics=record.get("diagnostics"),
        )

        driver_id = resolution["driver_id"]
        if driver_id is None:
            audit_logger.info(
                f"Skipped duty status for device={device_identifier} driver=unresolved "
                f"telemetry_ts={timestamp.isoformat()} status={record['duty_status']} "
                f"vehicle={resolution['vehicle_id']}: no active driver assignment"
            )
            interval_action = self.SKIPPED
            interval_id = None
        else:
            try:
                transition = self.interval_manager.apply_status(
                    driver_id=driver_id,
                    vehicle_id=resolution["vehicle_id"],
                    device_id=resolution["device_id"],
                    tenant_id=resolution["tenant_id"],
                    status=record["duty_status"],
                    timestamp=timestamp,
                )
            except TelemetryError as e:
                self.logger.error(
                    f"Failed to apply telemetry from device {device_identifier} "
                    f"for driver {driver_id}: {e.message}"
                )
                raise
            interval_action = transition["action"]
            interval_id = transition["interval_id"]

        self.logger.info(
            f"Telemetry processed device={device_identifier} driver={driver_id} "
            f"status={record['duty_status']} action={interval_action}"
        )
        return {
            "message": "Telemetry processed successfully",
            "timestamp": timestamp,
            "processed_at": timezone.now(),
            "interval_action": interval_action,
            "interval_id": interval_id,
        }
