"""Timeline builders for compliance tests."""

from datetime import timedelta

from eld_logs.models import DutyStatusInterval


def add_timeline(fleet, start, segments, open_status=None):
    """
    Write contiguous closed intervals for the fleet's driver.

    Args:
        fleet: Namespace returned by create_fleet
        start: Start of the first interval
        segments: Sequence of (status, minutes) pairs
        open_status: If given, an open interval of this status follows

    Returns:
        The time at which the last closed interval ends
    """
    cursor = start
    for status, minutes in segments:
        end = cursor + timedelta(minutes=minutes)
        DutyStatusInterval.objects.create(
            driver=fleet.driver,
            vehicle=fleet.vehicle,
            device=fleet.device,
            tenant_id=fleet.tenant_id,
            status=status,
            start_time=cursor,
            end_time=end,
        )
        cursor = end

    if open_status is not None:
        DutyStatusInterval.objects.create(
            driver=fleet.driver,
            vehicle=fleet.vehicle,
            device=fleet.device,
            tenant_id=fleet.tenant_id,
            status=open_status,
            start_time=cursor,
        )
    return cursor
