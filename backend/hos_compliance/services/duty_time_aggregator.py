"""
Duty Time Aggregator Service.

Sums closed duty status intervals by status over a lookback window
[now - W, now). An interval belongs to the window when its start time
falls inside it. The driver's open interval contributes nothing until it
is closed by the next status change, so live totals trail the driver's
actual elapsed time in the current status.

Read-only and idempotent; safe to retry and to run on slightly stale data.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from django.db.models import Sum
from django.utils import timezone

from eld_logs.models import DutyStatus, DutyStatusInterval

logger = logging.getLogger(__name__)


class DutyTimeAggregatorService:
    """
    Service for aggregating duty status minutes over time windows.

    Used with a 24-hour window for live compliance, an 8-day window for
    the cycle limit and a 30-day window for tenant analytics.
    """

    def __init__(self):
        """Initialize duty time aggregator."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @staticmethod
    def empty_totals() -> Dict[str, int]:
        """Totals mapping with every duty status at zero."""
        return {duty_status: 0 for duty_status in DutyStatus.values}

    @staticmethod
    def window_bounds(window: timedelta, now: Optional[datetime] = None):
        """Return (window_start, window_end) for a lookback ending at now."""
        now = now or timezone.now()
        return now - window, now

    def aggregate(
        self, driver_id, window: timedelta, now: Optional[datetime] = None
    ) -> Dict[str, int]:
        """
        Total closed-interval minutes per status for a driver.

        Args:
            driver_id: Driver identifier
            window: Lookback duration W
            now: End of the window (default: current time)

        Returns:
            Dict mapping each DutyStatus value to total minutes
        """
        window_start, window_end = self.window_bounds(window, now)
        return self.aggregate_between(driver_id, window_start, window_end)

    def aggregate_between(
        self, driver_id, window_start: datetime, window_end: datetime
    ) -> Dict[str, int]:
        """Total closed-interval minutes per status for intervals starting in [start, end)."""
        rows = (
            self.closed_intervals_in_window(window_start, window_end)
            .filter(driver_id=driver_id)
            .values("status")
            .annotate(total_minutes=Sum("duration_minutes"))
            .order_by()
        )

        totals = self.empty_totals()
        for row in rows:
            totals[row["status"]] = row["total_minutes"] or 0

        self.logger.debug(
            f"Aggregated driver {driver_id} from {window_start.isoformat()} "
            f"to {window_end.isoformat()}: {totals}"
        )
        return totals

    def aggregate_tenant(
        self, tenant_id, window: timedelta, now: Optional[datetime] = None
    ) -> Dict[str, Dict[str, int]]:
        """
        Total closed-interval minutes per status for every driver of a tenant.

        Returns:
            Dict mapping driver id (str) to a per-status totals dict
        """
        window_start, window_end = self.window_bounds(window, now)
        rows = (
            self.closed_intervals_in_window(window_start, window_end)
            .filter(tenant_id=tenant_id)
            .values("driver_id", "status")
            .annotate(total_minutes=Sum("duration_minutes"))
            .order_by()
        )

        per_driver = {}
        for row in rows:
            totals = per_driver.setdefault(str(row["driver_id"]), self.empty_totals())
            totals[row["status"]] = row["total_minutes"] or 0

        return per_driver

    def get_closed_intervals(
        self, driver_id, window: timedelta, now: Optional[datetime] = None
    ) -> List[DutyStatusInterval]:
        """Closed intervals in the window, oldest first."""
        window_start, window_end = self.window_bounds(window, now)
        return list(
            self.closed_intervals_in_window(window_start, window_end)
            .filter(driver_id=driver_id)
            .order_by("start_time", "created_at")
        )

    def closed_intervals_in_window(self, window_start: datetime, window_end: datetime):
        return DutyStatusInterval.objects.filter(
            start_time__gte=window_start,
            start_time__lt=window_end,
            end_time__isnull=False,
        )
