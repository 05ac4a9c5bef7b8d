"""
HOS Compliance API Views.

Provides REST API endpoints for driver compliance summaries and tenant
analytics. Summaries are rebuilt from the interval timeline on every
request; nothing here writes to the database.
"""

import logging
from rest_framework import viewsets, status
from rest_framework.response import Response
from rest_framework.permissions import AllowAny

from .serializers import ComplianceSummarySerializer, TenantAnalyticsSerializer
from .services.compliance_summary import ComplianceSummaryService, DriverNotFound
from .services.fleet_analytics import FleetAnalyticsService

logger = logging.getLogger(__name__)


class DriverComplianceViewSet(viewsets.ViewSet):
    """
    ViewSet for a driver's HOS compliance summary.

    Reports current duty status, 24-hour totals, remaining drive/duty
    time and any violations.
    """

    permission_classes = [AllowAny]

    def retrieve(self, request, driver_id=None):
        """Get the current compliance summary for a driver."""
        try:
            summary = ComplianceSummaryService().get_driver_summary(driver_id)

        except DriverNotFound as e:
            return Response(
                {'error': 'DriverNotFound', 'message': str(e)},
                status=status.HTTP_404_NOT_FOUND
            )
        except Exception as e:
            logger.error(f"Error building compliance summary for driver {driver_id}: {str(e)}")
            return Response(
                {'error': 'InternalServerError', 'message': 'Failed to build compliance summary'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        serializer = ComplianceSummarySerializer(summary)
        logger.info(f"Built compliance summary for driver {driver_id}")
        return Response(serializer.data)


class TenantAnalyticsViewSet(viewsets.ViewSet):
    """
    ViewSet for tenant-wide HOS analytics over the trailing 30 days.
    """

    permission_classes = [AllowAny]

    def retrieve(self, request, tenant_id=None):
        """Get duty time totals and violation counts for a tenant."""
        try:
            analytics = FleetAnalyticsService().get_tenant_analytics(tenant_id)

        except Exception as e:
            logger.error(f"Error building analytics for tenant {tenant_id}: {str(e)}")
            return Response(
                {'error': 'InternalServerError', 'message': 'Failed to build HOS analytics'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        serializer = TenantAnalyticsSerializer(analytics)
        return Response(serializer.data)
