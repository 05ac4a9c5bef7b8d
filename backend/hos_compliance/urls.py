"""
URL configuration for HOS Compliance API endpoints.

Provides URL routing for driver compliance summaries and tenant
analytics.
"""

from django.urls import path
from .views import DriverComplianceViewSet, TenantAnalyticsViewSet

urlpatterns = [
    path(
        "drivers/<uuid:driver_id>/summary/",
        DriverComplianceViewSet.as_view({"get": "retrieve"}),
        name="hos-driver-summary",
    ),
    path(
        "tenants/<uuid:tenant_id>/analytics/",
        TenantAnalyticsViewSet.as_view({"get": "retrieve"}),
        name="hos-tenant-analytics",
    ),
]

# API Documentation - Available Endpoints:
"""
GET Endpoints:
- /api/hos/drivers/<uuid:driver_id>/summary/ - Driver's current compliance summary
- /api/hos/tenants/<uuid:tenant_id>/analytics/ - Tenant duty time and violation analytics (30 days)
"""
