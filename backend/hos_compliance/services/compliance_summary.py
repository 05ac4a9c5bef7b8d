"""
Compliance Summary Service.

Builds a driver's Hours of Service compliance summary on demand:
current duty status from the open interval, 24-hour totals per status,
remaining drive/duty/cycle time and the violation list. Nothing is
persisted; every read rebuilds the summary from the interval history.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from django.conf import settings
from django.utils import timezone

from eld_devices.models import Driver
from eld_logs.models import DutyStatus, REST_STATUSES
from eld_logs.services.interval_manager import IntervalManagerService
from .duty_time_aggregator import DutyTimeAggregatorService
from .violation_detector import ViolationDetectorService

logger = logging.getLogger(__name__)


class ComplianceSummaryService:
    """
    Service for composing driver compliance summaries.

    Reads only; tolerates slightly stale data and is safe to retry.
    """

    def __init__(
        self,
        aggregator: Optional[DutyTimeAggregatorService] = None,
        detector: Optional[ViolationDetectorService] = None,
        interval_manager: Optional[IntervalManagerService] = None,
    ):
        """Initialize summary service with its collaborators."""
        hos_settings = getattr(settings, "HOS_SETTINGS", {})
        self.window = timedelta(hours=hos_settings.get("COMPLIANCE_WINDOW_HOURS", 24))
        self.cycle_window = timedelta(days=hos_settings.get("CYCLE_DAYS", 8))
        self.aggregator = aggregator or DutyTimeAggregatorService()
        self.detector = detector or ViolationDetectorService()
        self.interval_manager = interval_manager or IntervalManagerService()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def get_driver_summary(self, driver_id, now: Optional[datetime] = None) -> Dict:
        """
        Build the compliance summary for a driver.

        Args:
            driver_id: Driver identifier
            now: Evaluation time (default: current time)

        Returns:
            Dict with current status, window totals, remaining time,
            balances and violations

        Raises:
            DriverNotFound: If no driver has this id
        """
        try:
            driver = Driver.objects.get(id=driver_id)
        except Driver.DoesNotExist:
            raise DriverNotFound(f"Driver {driver_id} not found")

        evaluated_at = now or timezone.now()

        totals = self.aggregator.aggregate(driver.id, self.window, now=evaluated_at)
        cycle_totals = self.aggregator.aggregate(driver.id, self.cycle_window, now=evaluated_at)
        window_intervals = self.aggregator.get_closed_intervals(
            driver.id, self.window, now=evaluated_at
        )

        violations = self.detector.detect(totals, evaluated_at)
        break_violation = self.detector.detect_break_violation(window_intervals, evaluated_at)
        if break_violation:
            violations.append(break_violation)
        cycle_violation = self.detector.detect_cycle_violation(cycle_totals, evaluated_at)
        if cycle_violation:
            violations.append(cycle_violation)

        remaining = self.detector.calculate_remaining_time(totals, cycle_totals)
        open_interval = self.interval_manager.get_open_interval(driver.id)

        summary = self.build_summary(
            driver=driver,
            open_interval=open_interval,
            totals=totals,
            remaining=remaining,
            cycle_on_duty_minutes=self.detector.cycle_on_duty_minutes(cycle_totals),
            violations=violations,
            window_start=evaluated_at - self.window,
            evaluated_at=evaluated_at,
        )

        if violations:
            self.logger.warning(
                f"Driver {driver.id} has {len(violations)} HOS violation(s) at "
                f"{evaluated_at.isoformat()}"
            )
        return summary

    @staticmethod
    def build_summary(
        driver,
        open_interval,
        totals: Dict[str, int],
        remaining: Dict[str, int],
        cycle_on_duty_minutes: int,
        violations: List[Dict],
        window_start: datetime,
        evaluated_at: datetime,
    ) -> Dict:
        """
        Assemble the summary dict from already computed parts.

        Without an open interval the driver is reported off duty since
        the evaluation time.
        """
        if open_interval is not None:
            current_status = open_interval.status
            current_status_start_time = open_interval.start_time
        else:
            current_status = DutyStatus.OFF_DUTY.value
            current_status_start_time = evaluated_at

        return {
            "driver_id": driver.id,
            "driver_name": driver.name,
            "current_status": current_status,
            "current_status_start_time": current_status_start_time,
            "on_break": current_status in REST_STATUSES,
            "total_driving_minutes": totals[DutyStatus.DRIVING],
            "total_on_duty_minutes": totals[DutyStatus.ON_DUTY],
            "total_off_duty_minutes": totals[DutyStatus.OFF_DUTY],
            "total_sleeping_minutes": totals[DutyStatus.SLEEPING],
            "remaining_drive_time_minutes": remaining["remaining_drive_time_minutes"],
            "remaining_duty_time_minutes": remaining["remaining_duty_time_minutes"],
            "drive_time_balance_minutes": remaining["drive_time_balance_minutes"],
            "duty_time_balance_minutes": remaining["duty_time_balance_minutes"],
            "cycle_on_duty_minutes": cycle_on_duty_minutes,
            "remaining_cycle_time_minutes": remaining["remaining_cycle_time_minutes"],
            "cycle_time_balance_minutes": remaining["cycle_time_balance_minutes"],
            "violations": violations,
            "window_start": window_start,
            "evaluated_at": evaluated_at,
        }


class DriverNotFound(Exception):
    """Raised when a compliance summary is requested for an unknown driver."""
    pass
