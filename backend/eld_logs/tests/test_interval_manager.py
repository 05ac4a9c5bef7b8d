import threading
from datetime import date, datetime, timedelta, timezone as dt_timezone
from unittest.mock import patch

from django.db import DatabaseError, IntegrityError, connection, transaction
from django.test import TestCase, TransactionTestCase

from common.exceptions import ConcurrencyConflict, ImmutableIntervalError, StorageError
from eld_devices.tests.helpers import create_fleet
from eld_logs.models import DutyStatus, DutyStatusInterval
from eld_logs.services.interval_manager import IntervalManagerService

T0 = datetime(2024, 3, 10, 8, 0, tzinfo=dt_timezone.utc)


class IntervalManagerTestMixin:
    def make_manager(self, **kwargs):
        kwargs.setdefault("retry_backoff_seconds", 0)
        return IntervalManagerService(**kwargs)

    def apply(self, manager, status, timestamp):
        return manager.apply_status(
            driver_id=self.fleet.driver.id,
            vehicle_id=self.fleet.vehicle.id,
            device_id=self.fleet.device.id,
            tenant_id=self.fleet.tenant_id,
            status=status,
            timestamp=timestamp,
        )

    def driver_intervals(self):
        return list(
            DutyStatusInterval.objects.filter(driver=self.fleet.driver).order_by("start_time")
        )

    def assert_timeline_consistent(self):
        intervals = self.driver_intervals()
        open_intervals = [i for i in intervals if i.end_time is None]
        self.assertLessEqual(len(open_intervals), 1)
        for current, following in zip(intervals, intervals[1:]):
            self.assertEqual(current.end_time, following.start_time)
        for interval in intervals:
            if interval.end_time is None:
                self.assertIsNone(interval.duration_minutes)
            else:
                self.assertGreaterEqual(interval.duration_minutes, 0)


class IntervalStateMachineTests(IntervalManagerTestMixin, TestCase):
    def setUp(self):
        self.fleet = create_fleet()
        self.manager = self.make_manager()

    def test_first_status_opens_interval(self):
        result = self.apply(self.manager, DutyStatus.DRIVING, T0)

        intervals = self.driver_intervals()
        self.assertEqual(result["action"], IntervalManagerService.OPENED)
        self.assertEqual(len(intervals), 1)
        self.assertEqual(intervals[0].status, DutyStatus.DRIVING)
        self.assertEqual(intervals[0].start_time, T0)
        self.assertIsNone(intervals[0].end_time)
        self.assertEqual(result["interval_id"], intervals[0].id)

    def test_repeated_status_is_noop(self):
        self.apply(self.manager, DutyStatus.DRIVING, T0)
        before = self.driver_intervals()[0]

        result = self.apply(self.manager, DutyStatus.DRIVING, T0 + timedelta(minutes=15))

        intervals = self.driver_intervals()
        self.assertEqual(result["action"], IntervalManagerService.UNCHANGED)
        self.assertEqual(len(intervals), 1)
        self.assertEqual(intervals[0].start_time, T0)
        self.assertIsNone(intervals[0].end_time)
        self.assertEqual(intervals[0].updated_at, before.updated_at)

    def test_status_change_closes_and_opens(self):
        self.apply(self.manager, DutyStatus.DRIVING, T0)
        t1 = T0 + timedelta(hours=3, minutes=20)

        result = self.apply(self.manager, DutyStatus.ON_DUTY, t1)

        first, second = self.driver_intervals()
        self.assertEqual(result["action"], IntervalManagerService.TRANSITIONED)
        self.assertEqual(result["closed_interval_id"], first.id)
        self.assertEqual(result["interval_id"], second.id)
        self.assertEqual(first.status, DutyStatus.DRIVING)
        self.assertEqual(first.end_time, t1)
        self.assertEqual(first.duration_minutes, 200)
        self.assertEqual(second.status, DutyStatus.ON_DUTY)
        self.assertEqual(second.start_time, t1)
        self.assertIsNone(second.end_time)

    def test_timeline_stays_contiguous_over_many_changes(self):
        statuses = [
            DutyStatus.OFF_DUTY,
            DutyStatus.ON_DUTY,
            DutyStatus.DRIVING,
            DutyStatus.DRIVING,
            DutyStatus.ON_DUTY,
            DutyStatus.SLEEPING,
            DutyStatus.OFF_DUTY,
        ]
        for offset, status in enumerate(statuses):
            self.apply(self.manager, status, T0 + timedelta(minutes=47 * offset, seconds=offset))

        self.assertEqual(len(self.driver_intervals()), 6)
        self.assert_timeline_consistent()

    def test_duration_rounds_half_up(self):
        self.apply(self.manager, DutyStatus.DRIVING, T0)
        self.apply(self.manager, DutyStatus.ON_DUTY, T0 + timedelta(minutes=10, seconds=30))

        self.assertEqual(self.driver_intervals()[0].duration_minutes, 11)

    def test_transition_at_same_instant_gives_zero_duration(self):
        self.apply(self.manager, DutyStatus.DRIVING, T0)
        self.apply(self.manager, DutyStatus.ON_DUTY, T0)

        first, second = self.driver_intervals()
        self.assertEqual(first.duration_minutes, 0)
        self.assertIsNone(second.end_time)

    def test_out_of_order_telemetry_is_rejected(self):
        self.apply(self.manager, DutyStatus.DRIVING, T0)

        with self.assertLogs("eld_logs.audit", level="WARNING") as logs:
            result = self.apply(self.manager, DutyStatus.OFF_DUTY, T0 - timedelta(minutes=5))

        intervals = self.driver_intervals()
        self.assertEqual(result["action"], IntervalManagerService.OUT_OF_ORDER)
        self.assertEqual(len(intervals), 1)
        self.assertIsNone(intervals[0].end_time)
        self.assertIn("out-of-order", logs.output[0])
        self.assertIn(str(self.fleet.driver.id), logs.output[0])

    def test_stale_repeat_of_open_status_is_rejected(self):
        opened = self.apply(self.manager, DutyStatus.DRIVING, T0)

        with self.assertLogs("eld_logs.audit", level="WARNING") as logs:
            result = self.apply(self.manager, DutyStatus.DRIVING, T0 - timedelta(minutes=5))

        intervals = self.driver_intervals()
        self.assertEqual(result["action"], IntervalManagerService.OUT_OF_ORDER)
        self.assertEqual(result["interval_id"], opened["interval_id"])
        self.assertEqual(len(intervals), 1)
        self.assertEqual(intervals[0].start_time, T0)
        self.assertIsNone(intervals[0].end_time)
        self.assertIn("out-of-order", logs.output[0])

    def test_invalid_status_raises_value_error(self):
        with self.assertRaises(ValueError):
            self.apply(self.manager, "napping", T0)
        self.assertEqual(self.driver_intervals(), [])

    def test_drivers_are_independent(self):
        other = create_fleet(device_serial="ELD-0002", driver_name="Other Driver")
        self.apply(self.manager, DutyStatus.DRIVING, T0)
        self.manager.apply_status(
            driver_id=other.driver.id,
            vehicle_id=other.vehicle.id,
            device_id=other.device.id,
            tenant_id=other.tenant_id,
            status=DutyStatus.ON_DUTY,
            timestamp=T0,
        )

        self.assertEqual(DutyStatusInterval.objects.filter(end_time__isnull=True).count(), 2)


class IntervalImmutabilityTests(IntervalManagerTestMixin, TestCase):
    def setUp(self):
        self.fleet = create_fleet()
        self.manager = self.make_manager()

    def test_closed_interval_cannot_be_saved(self):
        self.apply(self.manager, DutyStatus.DRIVING, T0)
        self.apply(self.manager, DutyStatus.ON_DUTY, T0 + timedelta(hours=1))
        closed = self.driver_intervals()[0]

        closed.status = DutyStatus.SLEEPING
        with self.assertRaises(ImmutableIntervalError):
            closed.save()

        closed.refresh_from_db()
        self.assertEqual(closed.status, DutyStatus.DRIVING)

    def test_database_rejects_second_open_interval(self):
        self.apply(self.manager, DutyStatus.DRIVING, T0)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                DutyStatusInterval.objects.create(
                    driver=self.fleet.driver,
                    vehicle=self.fleet.vehicle,
                    device=self.fleet.device,
                    tenant_id=self.fleet.tenant_id,
                    status=DutyStatus.ON_DUTY,
                    start_time=T0 + timedelta(minutes=1),
                )


class IntervalConcurrencyTests(IntervalManagerTestMixin, TestCase):
    """
    Concurrent writers are simulated by feeding the state machine a stale
    view of the open interval while the database already holds the other
    writer's result.
    """

    def setUp(self):
        self.fleet = create_fleet()
        self.manager = self.make_manager()

    def inject_reads(self, stale_reads):
        real_read = self.manager._read_open_interval
        stale_reads = list(stale_reads)

        def read(driver_id):
            if stale_reads:
                return stale_reads.pop(0)
            return real_read(driver_id)

        return patch.object(self.manager, "_read_open_interval", side_effect=read)

    def test_close_lost_to_concurrent_writer_is_retried(self):
        self.apply(self.manager, DutyStatus.DRIVING, T0)
        stale = DutyStatusInterval.objects.get(driver=self.fleet.driver)
        t1 = T0 + timedelta(hours=1)
        t2 = T0 + timedelta(hours=2)
        self.apply(self.manager, DutyStatus.ON_DUTY, t1)

        with self.inject_reads([stale]), self.assertLogs("eld_logs.audit", level="WARNING") as logs:
            result = self.apply(self.manager, DutyStatus.OFF_DUTY, t2)

        intervals = self.driver_intervals()
        self.assertEqual(result["action"], IntervalManagerService.TRANSITIONED)
        self.assertEqual(result["attempts"], 2)
        self.assertEqual([i.status for i in intervals], [
            DutyStatus.DRIVING, DutyStatus.ON_DUTY, DutyStatus.OFF_DUTY,
        ])
        self.assertEqual(intervals[0].end_time, t1)
        self.assertEqual(result["closed_interval_id"], intervals[1].id)
        self.assertIn("ConcurrencyConflict", logs.output[0])
        self.assert_timeline_consistent()

    def test_open_lost_to_concurrent_writer_is_retried(self):
        self.apply(self.manager, DutyStatus.DRIVING, T0)
        t1 = T0 + timedelta(minutes=30)

        with self.inject_reads([None]):
            result = self.apply(self.manager, DutyStatus.ON_DUTY, t1)

        intervals = self.driver_intervals()
        self.assertEqual(result["attempts"], 2)
        self.assertEqual(result["action"], IntervalManagerService.TRANSITIONED)
        self.assertEqual(len(intervals), 2)
        self.assertEqual(intervals[0].duration_minutes, 30)
        self.assert_timeline_consistent()

    def test_same_status_race_settles_on_one_interval(self):
        self.apply(self.manager, DutyStatus.DRIVING, T0)

        with self.inject_reads([None]):
            result = self.apply(self.manager, DutyStatus.DRIVING, T0 + timedelta(seconds=1))

        self.assertEqual(result["action"], IntervalManagerService.UNCHANGED)
        self.assertEqual(len(self.driver_intervals()), 1)

    def test_persistent_conflict_surfaces_after_bounded_retries(self):
        self.apply(self.manager, DutyStatus.DRIVING, T0)
        stale = DutyStatusInterval.objects.get(driver=self.fleet.driver)
        self.apply(self.manager, DutyStatus.ON_DUTY, T0 + timedelta(hours=1))

        with self.inject_reads([stale] * 3) as read:
            with self.assertRaises(ConcurrencyConflict) as ctx:
                self.apply(self.manager, DutyStatus.OFF_DUTY, T0 + timedelta(hours=2))

        self.assertEqual(read.call_count, 3)
        self.assertTrue(ctx.exception.retryable)
        self.assertEqual(ctx.exception.driver_id, self.fleet.driver.id)
        self.assertEqual(len(self.driver_intervals()), 2)
        self.assert_timeline_consistent()

    def test_transient_storage_error_is_retried(self):
        real_open = self.manager._open_interval
        calls = []

        def flaky_open(*args):
            calls.append(args)
            if len(calls) == 1:
                raise DatabaseError("connection reset")
            return real_open(*args)

        with patch.object(self.manager, "_open_interval", side_effect=flaky_open):
            result = self.apply(self.manager, DutyStatus.DRIVING, T0)

        self.assertEqual(result["attempts"], 2)
        self.assertEqual(len(self.driver_intervals()), 1)

    def test_persistent_storage_error_surfaces(self):
        manager = self.make_manager(max_attempts=2)

        with patch.object(manager, "_open_interval", side_effect=DatabaseError("disk full")):
            with self.assertRaises(StorageError) as ctx:
                self.apply(manager, DutyStatus.DRIVING, T0)

        self.assertEqual(ctx.exception.http_status, 503)
        self.assertEqual(self.driver_intervals(), [])


class IntervalThreadedConcurrencyTests(IntervalManagerTestMixin, TransactionTestCase):
    """Real parallel writers against the configured database."""

    WRITERS = 8

    def setUp(self):
        self.fleet = create_fleet()

    def test_concurrent_status_changes_keep_one_open_interval(self):
        self.apply(self.make_manager(), DutyStatus.OFF_DUTY, T0)
        statuses = [
            DutyStatus.DRIVING,
            DutyStatus.ON_DUTY,
            DutyStatus.OFF_DUTY,
            DutyStatus.SLEEPING,
        ]
        barrier = threading.Barrier(self.WRITERS)
        errors = []
        results = []

        def worker(status, offset):
            try:
                barrier.wait()
                manager = self.make_manager(max_attempts=30, retry_backoff_seconds=0.01)
                results.append(self.apply(manager, status, T0 + offset))
            except Exception as e:
                errors.append(e)
            finally:
                connection.close()

        threads = [
            threading.Thread(
                target=worker,
                args=(statuses[i % len(statuses)], timedelta(minutes=i + 1)),
            )
            for i in range(self.WRITERS)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        self.assertEqual(len(results), self.WRITERS)
        self.assertEqual(
            DutyStatusInterval.objects.filter(
                driver=self.fleet.driver, end_time__isnull=True
            ).count(),
            1,
        )
        self.assert_timeline_consistent()


class DriverIntervalQueryTests(IntervalManagerTestMixin, TestCase):
    def setUp(self):
        self.fleet = create_fleet()
        self.manager = self.make_manager()
        # Mar 10 driving, Mar 11 on duty, Mar 12 off duty (open)
        self.apply(self.manager, DutyStatus.DRIVING, T0)
        self.apply(self.manager, DutyStatus.ON_DUTY, T0 + timedelta(days=1))
        self.apply(self.manager, DutyStatus.OFF_DUTY, T0 + timedelta(days=2))

    def test_returns_newest_first_including_open(self):
        intervals = list(
            self.manager.get_driver_intervals(
                self.fleet.driver.id, date(2024, 3, 1), date(2024, 3, 31)
            )
        )

        self.assertEqual([i.status for i in intervals], [
            DutyStatus.OFF_DUTY, DutyStatus.ON_DUTY, DutyStatus.DRIVING,
        ])

    def test_end_date_is_inclusive(self):
        intervals = list(
            self.manager.get_driver_intervals(
                self.fleet.driver.id, date(2024, 3, 10), date(2024, 3, 11)
            )
        )

        # Mar 10 driving closed on Mar 11 08:00; the Mar 11 interval closed on
        # Mar 12 is outside; the open interval always matches.
        self.assertEqual([i.status for i in intervals], [
            DutyStatus.OFF_DUTY, DutyStatus.DRIVING,
        ])

    def test_start_date_excludes_earlier_intervals(self):
        intervals = list(
            self.manager.get_driver_intervals(
                self.fleet.driver.id, date(2024, 3, 11), date(2024, 3, 31)
            )
        )

        self.assertEqual([i.status for i in intervals], [
            DutyStatus.OFF_DUTY, DutyStatus.ON_DUTY,
        ])

    def test_defaults_cover_last_week(self):
        manager = self.make_manager()
        recent = datetime.now(dt_timezone.utc) - timedelta(days=1)
        self.apply(manager, DutyStatus.DRIVING, recent)

        intervals = list(manager.get_driver_intervals(self.fleet.driver.id))

        self.assertEqual(len(intervals), 1)
        self.assertEqual(intervals[0].start_time, recent)
