"""
URL configuration for hos_tracking_api project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse

def api_root(request):
    """API root endpoint with available endpoints."""
    return JsonResponse({
        'message': 'HOS Tracking API',
        'version': '1.0',
        'endpoints': {
            'eld_logs': '/api/eld/',
            'hos_compliance': '/api/hos/',
            'admin': '/admin/',
        },
        'documentation': {
            'eld_logs': {
                'description': 'Telemetry ingestion and duty status intervals',
                'endpoints': {
                    'telemetry': 'POST /api/eld/telemetry/ - Ingest one telemetry record',
                    'intervals': 'GET /api/eld/drivers/<uuid>/intervals/?start_date=&end_date= - Driver intervals',
                    'health': 'GET /api/eld/health/ - Health check',
                }
            },
            'hos_compliance': {
                'description': 'Hours of Service summaries and analytics',
                'endpoints': {
                    'summary': 'GET /api/hos/drivers/<uuid>/summary/ - Current compliance summary',
                    'analytics': 'GET /api/hos/tenants/<uuid>/analytics/ - 30-day tenant analytics',
                }
            }
        }
    })

urlpatterns = [
    # Admin interface
    path("admin/", admin.site.urls),

    # API root
    path("api/", api_root, name='api-root'),

    # ELD Logs API
    path("api/eld/", include("eld_logs.urls")),

    # HOS Compliance API
    path("api/hos/", include("hos_compliance.urls")),
]
