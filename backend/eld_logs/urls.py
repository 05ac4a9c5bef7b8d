"""
URL configuration for ELD Logs API endpoints.

Provides URL routing for telemetry ingestion and duty status
interval queries.
"""

from django.urls import path
from .views import (
    DriverIntervalViewSet,
    HealthCheckView,
    TelemetryViewSet,
)

urlpatterns = [
    path(
        "telemetry/",
        TelemetryViewSet.as_view({"post": "ingest"}),
        name="eld-telemetry-ingest",
    ),
    path(
        "drivers/<uuid:driver_id>/intervals/",
        DriverIntervalViewSet.as_view({"get": "list"}),
        name="eld-driver-intervals",
    ),
    path("health/", HealthCheckView.as_view(), name="eld-health"),
]

# API Documentation - Available Endpoints:
"""
GET Endpoints:
- /api/eld/drivers/<uuid:driver_id>/intervals/?start_date=YYYY-MM-DD&end_date=YYYY-MM-DD
  - Driver's duty status intervals, newest first
- /api/eld/health/ - Health check

POST Endpoints:
- /api/eld/telemetry/ - Ingest one telemetry record from an ELD device
"""
