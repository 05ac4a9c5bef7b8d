"""
ELD Logs API Views.

Provides REST API endpoints for telemetry ingestion and duty status
interval queries. Business logic lives in the service layer; views only
translate between HTTP and services.
"""

import logging
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from common.exceptions import TelemetryError
from .serializers import (
    DutyStatusIntervalSerializer,
    IntervalQuerySerializer,
    TelemetryIngestResponseSerializer,
)
from .services.interval_manager import IntervalManagerService
from .services.telemetry_ingestor import TelemetryIngestorService

logger = logging.getLogger(__name__)


class HealthCheckView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({"status": "ok"})


class TelemetryViewSet(viewsets.ViewSet):
    """
    ViewSet for ELD telemetry ingestion.

    Accepts one normalized telemetry record per request and applies the
    reported duty status to the driver's interval timeline.
    """

    permission_classes = [AllowAny]

    @action(detail=False, methods=['post'])
    def ingest(self, request):
        """
        Ingest one telemetry record.

        Request Body:
            device_id (string): Device serial
            timestamp (ISO-8601): Device timestamp
            latitude / longitude (number): Position
            speed (number): Speed
            engine_status (string): "on" or "off"
            duty_status (string): driving, on_duty, off_duty or sleeping
            diagnostics (object, optional): Free-form diagnostics
        """
        try:
            result = TelemetryIngestorService().ingest(request.data)

        except TelemetryError as e:
            return Response(e.to_response(), status=e.http_status)
        except Exception as e:
            logger.error(f"Error processing ELD telemetry: {str(e)}")
            return Response(
                {'error': 'InternalServerError', 'message': 'Failed to process telemetry data'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        response_serializer = TelemetryIngestResponseSerializer(result)
        return Response(response_serializer.data, status=status.HTTP_200_OK)


class DriverIntervalViewSet(viewsets.ViewSet):
    """
    ViewSet for a driver's duty status intervals.

    Returns closed and open intervals ordered by start time, newest first.
    """

    permission_classes = [AllowAny]

    def list(self, request, driver_id=None):
        """
        List intervals for a driver.

        Query Parameters:
            start_date (YYYY-MM-DD, optional): First day (default: 7 days ago)
            end_date (YYYY-MM-DD, optional): Last day, inclusive (default: today)
        """
        query_serializer = IntervalQuerySerializer(data=request.query_params)

        if not query_serializer.is_valid():
            return Response(
                query_serializer.errors,
                status=status.HTTP_400_BAD_REQUEST
            )

        intervals = IntervalManagerService().get_driver_intervals(
            driver_id,
            start_date=query_serializer.validated_data.get('start_date'),
            end_date=query_serializer.validated_data.get('end_date'),
        )
        serializer = DutyStatusIntervalSerializer(intervals, many=True)

        logger.info(f"Retrieved {len(serializer.data)} intervals for driver {driver_id}")
        return Response({
            'driver_id': str(driver_id),
            'intervals': serializer.data,
            'total_intervals': len(serializer.data),
        })
