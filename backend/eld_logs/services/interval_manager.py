"""
Interval Manager Service.

The duty status state machine. Owns the creation and closing of
DutyStatusInterval records: each telemetry status either opens the
driver's first interval, is absorbed by the open interval of the same
status, or closes the open interval and opens the next one.

Transitions are concurrency-safe without any process-local locking:
- close-old and open-new run inside one database transaction;
- the close is a conditional update on the observed interval id that
  only matches while the interval is still open;
- a partial unique constraint forbids a second open interval per driver.
A lost race surfaces as ConcurrencyConflict and the transition is
re-read and re-applied a bounded number of times.

Single Responsibility: duty status interval writes (and interval reads).
"""

import logging
import time
from datetime import datetime, date, time as dt_time, timedelta, timezone as dt_timezone
from typing import Dict, Optional
from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from common.exceptions import ConcurrencyConflict, StorageError
from common.validators import calculate_duration_minutes
from ..models import DutyStatus, DutyStatusInterval

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("eld_logs.audit")


class IntervalManagerService:
    """
    Service applying duty status telemetry to a driver's interval timeline.

    Every call to apply_status returns a dict describing what happened;
    the ``action`` key is one of OPENED, UNCHANGED, TRANSITIONED or
    OUT_OF_ORDER.
    """

    OPENED = "opened"
    UNCHANGED = "unchanged"
    TRANSITIONED = "transitioned"
    OUT_OF_ORDER = "out_of_order"

    DEFAULT_MAX_ATTEMPTS = 3
    DEFAULT_RETRY_BACKOFF_SECONDS = 0.05

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        retry_backoff_seconds: Optional[float] = None,
    ):
        """Initialize interval manager with retry policy from ELD_SETTINGS."""
        eld_settings = getattr(settings, "ELD_SETTINGS", {})
        self.max_attempts = max(
            1,
            max_attempts
            if max_attempts is not None
            else eld_settings.get("TRANSITION_MAX_ATTEMPTS", self.DEFAULT_MAX_ATTEMPTS),
        )
        self.retry_backoff_seconds = (
            retry_backoff_seconds
            if retry_backoff_seconds is not None
            else eld_settings.get(
                "TRANSITION_RETRY_BACKOFF_SECONDS", self.DEFAULT_RETRY_BACKOFF_SECONDS
            )
        )
        self.query_default_days = eld_settings.get("INTERVAL_QUERY_DEFAULT_DAYS", 7)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def apply_status(
        self,
        driver_id,
        vehicle_id,
        device_id,
        tenant_id,
        status: str,
        timestamp: datetime,
    ) -> Dict:
        """
        Apply one duty status observation to the driver's timeline.

        Args:
            driver_id: Driver the telemetry was attributed to
            vehicle_id: Vehicle the device is installed in
            device_id: Reporting ELD device
            tenant_id: Owning tenant
            status: Reported duty status (a DutyStatus value)
            timestamp: Device timestamp of the observation

        Returns:
            Dict with action, driver_id, status, timestamp, interval_id,
            closed_interval_id and attempts

        Raises:
            ValueError: If status is not a DutyStatus value
            ConcurrencyConflict: If concurrent writers kept winning after all attempts
            StorageError: If the database kept failing after all attempts
        """
        if status not in DutyStatus.values:
            raise ValueError(f"Invalid duty status: {status}")

        last_error = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                with transaction.atomic():
                    result = self._transition(
                        driver_id, vehicle_id, device_id, tenant_id, status, timestamp
                    )
                result["attempts"] = attempt
                return result

            except ConcurrencyConflict as e:
                last_error = e
            except IntegrityError as e:
                last_error = ConcurrencyConflict(
                    f"Open interval for driver {driver_id} was created concurrently",
                    details=str(e),
                    device_id=device_id,
                    driver_id=driver_id,
                    timestamp=timestamp,
                )
            except DatabaseError as e:
                last_error = StorageError(
                    f"Failed to persist duty status transition for driver {driver_id}",
                    details=str(e),
                    device_id=device_id,
                    driver_id=driver_id,
                    timestamp=timestamp,
                )

            audit_logger.warning(
                f"Retrying transition driver={driver_id} device={device_id} "
                f"telemetry_ts={timestamp.isoformat()} status={status} "
                f"attempt={attempt}/{self.max_attempts} reason={last_error.error_code}: "
                f"{last_error.message}"
            )
            if attempt < self.max_attempts and self.retry_backoff_seconds:
                time.sleep(self.retry_backoff_seconds * attempt)

        audit_logger.error(
            f"Transition abandoned driver={driver_id} device={device_id} "
            f"telemetry_ts={timestamp.isoformat()} status={status} "
            f"after {self.max_attempts} attempts: {last_error.error_code}"
        )
        raise last_error

    def get_open_interval(self, driver_id) -> Optional[DutyStatusInterval]:
        """Return the driver's open interval, or None."""
        return (
            DutyStatusInterval.objects.filter(driver_id=driver_id, end_time__isnull=True)
            .order_by("-start_time")
            .first()
        )

    def get_driver_intervals(
        self,
        driver_id,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ):
        """
        Get a driver's intervals between two calendar dates (UTC).

        An interval matches when it starts on or after start_date and either
        ends by the end of end_date or is still open.

        Args:
            driver_id: Driver identifier
            start_date: First day included (default: INTERVAL_QUERY_DEFAULT_DAYS ago)
            end_date: Last day included (default: today)

        Returns:
            QuerySet ordered by start_time descending
        """
        today = timezone.now().date()
        start_date = start_date or today - timedelta(days=self.query_default_days)
        end_date = end_date or today

        start_bound = datetime.combine(start_date, dt_time.min, tzinfo=dt_timezone.utc)
        end_bound = datetime.combine(end_date, dt_time.max, tzinfo=dt_timezone.utc)

        return (
            DutyStatusInterval.objects.filter(driver_id=driver_id, start_time__gte=start_bound)
            .filter(Q(end_time__lte=end_bound) | Q(end_time__isnull=True))
            .order_by("-start_time", "-created_at")
        )

    def _read_open_interval(self, driver_id) -> Optional[DutyStatusInterval]:
        """Read the open interval, row-locking it where the backend supports it."""
        return (
            DutyStatusInterval.objects.select_for_update()
            .filter(driver_id=driver_id, end_time__isnull=True)
            .order_by("-start_time")
            .first()
        )

    def _transition(
        self,
        driver_id,
        vehicle_id,
        device_id,
        tenant_id,
        status: str,
        timestamp: datetime,
    ) -> Dict:
        """Run one read-decide-write step. Must be called inside a transaction."""
        open_interval = self._read_open_interval(driver_id)

        if open_interval is None:
            interval = self._open_interval(
                driver_id, vehicle_id, device_id, tenant_id, status, timestamp
            )
            self.logger.info(f"Opened first {status} interval {interval.id} for driver {driver_id}")
            return self._build_result(self.OPENED, driver_id, status, timestamp, interval.id)

        if timestamp < open_interval.start_time:
            audit_logger.warning(
                f"Rejected out-of-order telemetry driver={driver_id} device={device_id} "
                f"telemetry_ts={timestamp.isoformat()} status={status} "
                f"open_interval={open_interval.id} open_since={open_interval.start_time.isoformat()}"
            )
            return self._build_result(
                self.OUT_OF_ORDER, driver_id, status, timestamp, open_interval.id
            )

        if open_interval.status == status:
            self.logger.debug(
                f"Driver {driver_id} already {status} since {open_interval.start_time.isoformat()}"
            )
            return self._build_result(
                self.UNCHANGED, driver_id, status, timestamp, open_interval.id
            )

        duration = calculate_duration_minutes(open_interval.start_time, timestamp)
        closed = DutyStatusInterval.objects.filter(
            pk=open_interval.pk, end_time__isnull=True
        ).update(end_time=timestamp, duration_minutes=duration, updated_at=timezone.now())

        if closed != 1:
            raise ConcurrencyConflict(
                f"Interval {open_interval.id} for driver {driver_id} was closed by a concurrent writer",
                device_id=device_id,
                driver_id=driver_id,
                timestamp=timestamp,
            )

        interval = self._open_interval(
            driver_id, vehicle_id, device_id, tenant_id, status, timestamp
        )

        self.logger.info(
            f"Status change recorded for driver {driver_id}: "
            f"{open_interval.status} -> {status} ({duration} min)"
        )
        return self._build_result(
            self.TRANSITIONED,
            driver_id,
            status,
            timestamp,
            interval.id,
            closed_interval_id=open_interval.id,
        )

    def _open_interval(self, driver_id, vehicle_id, device_id, tenant_id, status, timestamp):
        """Insert a new open interval."""
        return DutyStatusInterval.objects.create(
            driver_id=driver_id,
            vehicle_id=vehicle_id,
            device_id=device_id,
            tenant_id=tenant_id,
            status=status,
            start_time=timestamp,
        )

    def _build_result(
        self, action, driver_id, status, timestamp, interval_id, closed_interval_id=None
    ) -> Dict:
        return {
            "action": action,
            "driver_id": driver_id,
            "status": status,
            "timestamp": timestamp,
            "interval_id": interval_id,
            "closed_interval_id": closed_interval_id,
        }
