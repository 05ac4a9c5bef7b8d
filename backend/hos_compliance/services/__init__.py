"""
HOS Compliance Services Package.

This package contains the read-only services that evaluate a driver's
duty status timeline against Hours of Service limits.

Services:
- DutyTimeAggregatorService: Duty minutes by status over a lookback window
- ViolationDetectorService: Threshold checks and remaining time
- ComplianceSummaryService: Per-driver compliance summary
- FleetAnalyticsService: Tenant-wide duty time and violation analytics
"""

from .duty_time_aggregator import DutyTimeAggregatorService
from .violation_detector import ViolationDetectorService, ViolationType
from .compliance_summary import ComplianceSummaryService, DriverNotFound
from .fleet_analytics import FleetAnalyticsService

__all__ = [
    'DutyTimeAggregatorService',
    'ViolationDetectorService',
    'ViolationType',
    'ComplianceSummaryService',
    'DriverNotFound',
    'FleetAnalyticsService',
]
