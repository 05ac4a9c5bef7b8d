"""
Violation Detector Service.

Applies Hours of Service thresholds to aggregated duty minutes:
- 11-hour driving limit (drive_time)
- 14-hour on-duty limit (duty_time)
- 70-hour / 8-day cycle limit (cycle)
- 30-minute break after 8 hours of driving (break)

Violations are derived facts stamped with the evaluation time, not the
moment the limit was actually crossed. Remaining-time figures are
computed alongside them in two forms: clamped at zero for display and
unclamped (negative once over the limit) for analytics and severity.

Single Responsibility: threshold checks and remaining-time math only.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from django.conf import settings
from django.db import models

from eld_logs.models import DutyStatus

logger = logging.getLogger(__name__)


class ViolationType(models.TextChoices):
    DRIVE_TIME = "drive_time", "11-Hour Driving Limit"
    DUTY_TIME = "duty_time", "14-Hour On-Duty Limit"
    BREAK = "break", "30-Minute Break Required"
    CYCLE = "cycle", "70-Hour/8-Day Cycle Limit"


class ViolationDetectorService:
    """
    Service for detecting HOS violations from duty minute totals.

    Thresholds come from HOS_SETTINGS and default to the FMCSA values
    for property-carrying drivers.
    """

    DEFAULT_MAX_DRIVING_MINUTES = 660
    DEFAULT_MAX_ON_DUTY_MINUTES = 840
    DEFAULT_MAX_CYCLE_MINUTES = 4200
    DEFAULT_MAX_DRIVING_BEFORE_BREAK_MINUTES = 480
    DEFAULT_REQUIRED_BREAK_MINUTES = 30

    def __init__(self):
        """Initialize violation detector with thresholds from HOS_SETTINGS."""
        hos_settings = getattr(settings, "HOS_SETTINGS", {})
        self.max_driving_minutes = hos_settings.get(
            "MAX_DRIVING_MINUTES", self.DEFAULT_MAX_DRIVING_MINUTES
        )
        self.max_on_duty_minutes = hos_settings.get(
            "MAX_ON_DUTY_MINUTES", self.DEFAULT_MAX_ON_DUTY_MINUTES
        )
        self.max_cycle_minutes = hos_settings.get(
            "MAX_CYCLE_MINUTES", self.DEFAULT_MAX_CYCLE_MINUTES
        )
        self.max_driving_before_break_minutes = hos_settings.get(
            "MAX_DRIVING_BEFORE_BREAK_MINUTES", self.DEFAULT_MAX_DRIVING_BEFORE_BREAK_MINUTES
        )
        self.required_break_minutes = hos_settings.get(
            "REQUIRED_BREAK_MINUTES", self.DEFAULT_REQUIRED_BREAK_MINUTES
        )
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def detect(self, totals: Dict[str, int], evaluated_at: datetime) -> List[Dict]:
        """
        Check 24-hour totals against the driving and on-duty limits.

        Args:
            totals: Minutes per duty status for the evaluation window
            evaluated_at: Evaluation time, used as each violation's timestamp

        Returns:
            List of violation dicts (type, description, timestamp,
            minutes, limit_minutes), drive_time before duty_time
        """
        violations = []
        driving = totals.get(DutyStatus.DRIVING, 0)
        on_duty = driving + totals.get(DutyStatus.ON_DUTY, 0)

        if driving > self.max_driving_minutes:
            violations.append(
                self._build_violation(
                    ViolationType.DRIVE_TIME,
                    f"Exceeded maximum driving time of {self._format_limit(self.max_driving_minutes)} "
                    f"({self._format_minutes(driving)})",
                    evaluated_at,
                    driving,
                    self.max_driving_minutes,
                )
            )

        if on_duty > self.max_on_duty_minutes:
            violations.append(
                self._build_violation(
                    ViolationType.DUTY_TIME,
                    f"Exceeded maximum on-duty time of {self._format_limit(self.max_on_duty_minutes)} "
                    f"({self._format_minutes(on_duty)})",
                    evaluated_at,
                    on_duty,
                    self.max_on_duty_minutes,
                )
            )

        if violations:
            self.logger.info(
                f"Detected {len(violations)} violation(s): "
                f"{', '.join(v['type'] for v in violations)}"
            )
        return violations

    def detect_cycle_violation(
        self, cycle_totals: Dict[str, int], evaluated_at: datetime
    ) -> Optional[Dict]:
        """Check cycle-window totals against the 70-hour limit."""
        cycle_minutes = self.cycle_on_duty_minutes(cycle_totals)
        if cycle_minutes <= self.max_cycle_minutes:
            return None

        return self._build_violation(
            ViolationType.CYCLE,
            f"Exceeded cycle limit of {self._format_limit(self.max_cycle_minutes)} "
            f"({self._format_minutes(cycle_minutes)})",
            evaluated_at,
            cycle_minutes,
            self.max_cycle_minutes,
        )

    def detect_break_violation(
        self, intervals: Iterable, evaluated_at: datetime
    ) -> Optional[Dict]:
        """
        Check for driving past the break threshold without a qualifying break.

        A closed non-driving interval of at least REQUIRED_BREAK_MINUTES
        resets the running driving total; shorter ones do not.

        Args:
            intervals: Closed intervals ordered oldest first
            evaluated_at: Evaluation time
        """
        continuous_driving = 0
        longest_stretch = 0

        for interval in intervals:
            minutes = interval.duration_minutes or 0
            if interval.status == DutyStatus.DRIVING:
                continuous_driving += minutes
                longest_stretch = max(longest_stretch, continuous_driving)
            elif minutes >= self.required_break_minutes:
                continuous_driving = 0

        if longest_stretch <= self.max_driving_before_break_minutes:
            return None

        return self._build_violation(
            ViolationType.BREAK,
            f"Drove {self._format_minutes(longest_stretch)} without a "
            f"{self.required_break_minutes}-minute break "
            f"(limit {self._format_limit(self.max_driving_before_break_minutes)})",
            evaluated_at,
            longest_stretch,
            self.max_driving_before_break_minutes,
        )

    def calculate_remaining_time(
        self, totals: Dict[str, int], cycle_totals: Optional[Dict[str, int]] = None
    ) -> Dict[str, int]:
        """
        Remaining drive/duty (and optionally cycle) minutes.

        The *_balance_minutes values are unclamped and go negative once a
        limit is exceeded; the remaining_* values never drop below zero.
        """
        driving = totals.get(DutyStatus.DRIVING, 0)
        on_duty = driving + totals.get(DutyStatus.ON_DUTY, 0)

        drive_balance = self.max_driving_minutes - driving
        duty_balance = self.max_on_duty_minutes - on_duty

        result = {
            "remaining_drive_time_minutes": max(0, drive_balance),
            "remaining_duty_time_minutes": max(0, duty_balance),
            "drive_time_balance_minutes": drive_balance,
            "duty_time_balance_minutes": duty_balance,
        }

        if cycle_totals is not None:
            cycle_balance = self.max_cycle_minutes - self.cycle_on_duty_minutes(cycle_totals)
            result["remaining_cycle_time_minutes"] = max(0, cycle_balance)
            result["cycle_time_balance_minutes"] = cycle_balance

        return result

    def classify_interval_exceedances(self, status: str, duration_minutes: int) -> List[str]:
        """
        Limits a single closed interval exceeds on its own.

        Used for per-interval analytics counts: a Driving interval longer
        than the driving limit is drive_time; a Driving or OnDuty interval
        longer than the on-duty limit is duty_time. The driving check wins
        when both apply.
        """
        if status == DutyStatus.DRIVING and duration_minutes > self.max_driving_minutes:
            return [ViolationType.DRIVE_TIME.value]
        if (
            status in (DutyStatus.DRIVING, DutyStatus.ON_DUTY)
            and duration_minutes > self.max_on_duty_minutes
        ):
            return [ViolationType.DUTY_TIME.value]
        return []

    @staticmethod
    def cycle_on_duty_minutes(totals: Dict[str, int]) -> int:
        return totals.get(DutyStatus.DRIVING, 0) + totals.get(DutyStatus.ON_DUTY, 0)

    def _build_violation(self, violation_type, description, evaluated_at, minutes, limit_minutes):
        return {
            "type": violation_type.value,
            "description": description,
            "timestamp": evaluated_at,
            "minutes": minutes,
            "limit_minutes": limit_minutes,
        }

    @staticmethod
    def _format_minutes(minutes: int) -> str:
        return f"{minutes // 60} hours {minutes % 60} minutes"

    @staticmethod
    def _format_limit(minutes: int) -> str:
        if minutes % 60 == 0:
            return f"{minutes // 60} hours"
        return f"{minutes} minutes"
