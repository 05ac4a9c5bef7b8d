import uuid
from datetime import timedelta
from unittest.mock import patch

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from eld_devices.tests.helpers import create_fleet
from eld_logs.models import DutyStatus
from hos_compliance.services import ComplianceSummaryService
from hos_compliance.tests.helpers import add_timeline


class DriverSummaryAPITests(APITestCase):
    def setUp(self):
        self.fleet = create_fleet()

    def test_summary_with_violation(self):
        add_timeline(
            self.fleet,
            timezone.now() - timedelta(hours=18),
            [(DutyStatus.DRIVING, 400), (DutyStatus.OFF_DUTY, 30), (DutyStatus.DRIVING, 300)],
            open_status=DutyStatus.SLEEPING,
        )
        url = reverse("hos-driver-summary", kwargs={"driver_id": self.fleet.driver.id})

        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["driver_id"], str(self.fleet.driver.id))
        self.assertEqual(response.data["current_status"], "sleeping")
        self.assertTrue(response.data["on_break"])
        self.assertEqual(response.data["total_driving_minutes"], 700)
        self.assertEqual(response.data["remaining_drive_time_minutes"], 0)
        self.assertEqual(response.data["drive_time_balance_minutes"], -40)
        self.assertEqual(response.data["cycle_time_balance_minutes"], 4200 - 700)
        self.assertEqual(response.data["violations"][0]["type"], "drive_time")

    def test_unknown_driver_returns_404(self):
        url = reverse("hos-driver-summary", kwargs={"driver_id": uuid.uuid4()})

        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"], "DriverNotFound")

    def test_unexpected_error_returns_500(self):
        url = reverse("hos-driver-summary", kwargs={"driver_id": self.fleet.driver.id})

        with patch.object(
            ComplianceSummaryService, "get_driver_summary", side_effect=RuntimeError("boom")
        ):
            response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)


class TenantAnalyticsAPITests(APITestCase):
    def test_tenant_analytics(self):
        fleet = create_fleet()
        add_timeline(
            fleet, timezone.now() - timedelta(days=3), [(DutyStatus.DRIVING, 720)]
        )
        url = reverse("hos-tenant-analytics", kwargs={"tenant_id": fleet.tenant_id})

        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["tenant_id"], str(fleet.tenant_id))
        self.assertEqual(response.data["summary"], {"total_drivers": 1, "total_violations": 1})
        self.assertEqual(response.data["drivers"][0]["driver_id"], str(fleet.driver.id))
        self.assertEqual(response.data["violations"]["drive_time"], 1)
        self.assertEqual(
            response.data["drivers"][0]["violations"], {"drive_time": 1, "duty_time": 0}
        )
