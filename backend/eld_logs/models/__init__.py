"""
ELD Logs models package.

Contains the duty status interval timeline recorded from ELD telemetry.
"""

from .duty_status_interval import DutyStatus, DutyStatusInterval, REST_STATUSES

__all__ = ['DutyStatus', 'DutyStatusInterval', 'REST_STATUSES']
