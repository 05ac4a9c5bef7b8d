"""
Fleet Analytics Service.

Tenant-level Hours of Service analytics over a trailing window
(30 days by default): per-driver duty minutes by status and counts of
individual intervals that on their own exceed the driving or on-duty
limit, tenant-wide and per driver.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple
from django.conf import settings
from django.utils import timezone

from eld_devices.models import Driver
from eld_logs.models import DutyStatus
from .duty_time_aggregator import DutyTimeAggregatorService
from .violation_detector import ViolationDetectorService, ViolationType

logger = logging.getLogger(__name__)


class FleetAnalyticsService:
    """Service for tenant-wide duty time and violation analytics."""

    def __init__(
        self,
        aggregator: Optional[DutyTimeAggregatorService] = None,
        detector: Optional[ViolationDetectorService] = None,
    ):
        eld_settings = getattr(settings, "ELD_SETTINGS", {})
        self.window = timedelta(days=eld_settings.get("ANALYTICS_WINDOW_DAYS", 30))
        self.aggregator = aggregator or DutyTimeAggregatorService()
        self.detector = detector or ViolationDetectorService()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def get_tenant_analytics(self, tenant_id, now: Optional[datetime] = None) -> Dict:
        """
        Build analytics for all drivers of a tenant with intervals in the window.

        Args:
            tenant_id: Tenant identifier
            now: End of the window (default: current time)

        Returns:
            Dict with window bounds, per-driver totals, per-type
            violation counts and a summary
        """
        now = now or timezone.now()
        window_start = now - self.window

        per_driver = self.aggregator.aggregate_tenant(tenant_id, self.window, now=now)
        violation_counts, driver_violations = self._count_interval_violations(
            tenant_id, window_start, now
        )

        driver_names = {
            str(driver_id): name
            for driver_id, name in Driver.objects.filter(
                id__in=list(per_driver.keys())
            ).values_list("id", "name")
        }

        drivers = []
        for driver_id, totals in sorted(per_driver.items()):
            drivers.append({
                "driver_id": driver_id,
                "driver_name": driver_names.get(driver_id),
                "total_driving_minutes": totals[DutyStatus.DRIVING],
                "total_on_duty_minutes": totals[DutyStatus.ON_DUTY],
                "total_off_duty_minutes": totals[DutyStatus.OFF_DUTY],
                "total_sleeping_minutes": totals[DutyStatus.SLEEPING],
                "violations": driver_violations.get(driver_id, self._empty_counts()),
            })

        total_violations = sum(violation_counts.values())
        self.logger.info(
            f"Tenant {tenant_id} analytics: {len(drivers)} drivers, "
            f"{total_violations} interval violations since {window_start.isoformat()}"
        )

        return {
            "tenant_id": str(tenant_id),
            "window_start": window_start,
            "window_end": now,
            "drivers": drivers,
            "violations": violation_counts,
            "summary": {
                "total_drivers": len(drivers),
                "total_violations": total_violations,
            },
        }

    def _empty_counts(self) -> Dict[str, int]:
        return {
            ViolationType.DRIVE_TIME.value: 0,
            ViolationType.DUTY_TIME.value: 0,
        }

    def _count_interval_violations(
        self, tenant_id, window_start, window_end
    ) -> Tuple[Dict[str, int], Dict[str, Dict[str, int]]]:
        """Return tenant-wide and per-driver counts of over-limit intervals."""
        counts = self._empty_counts()
        per_driver: Dict[str, Dict[str, int]] = {}
        candidates = (
            self.aggregator.closed_intervals_in_window(window_start, window_end)
            .filter(
                tenant_id=tenant_id,
                status__in=[DutyStatus.DRIVING, DutyStatus.ON_DUTY],
                duration_minutes__gt=min(
                    self.detector.max_driving_minutes, self.detector.max_on_duty_minutes
                ),
            )
            .values_list("driver_id", "status", "duration_minutes")
        )
        for driver_id, status, duration_minutes in candidates:
            driver_counts = per_driver.setdefault(str(driver_id), self._empty_counts())
            for violation_type in self.detector.classify_interval_exceedances(
                status, duration_minutes
            ):
                counts[violation_type] += 1
                driver_counts[violation_type] += 1
        return counts, per_driver
