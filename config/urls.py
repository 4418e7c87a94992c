"""
URL configuration for Django Ninja API.
All endpoints under /api/v1/ prefix.
"""

from django.conf import settings
from django.contrib import admin
from django.http import JsonResponse
from django.urls import path
from ninja import NinjaAPI

from imports.api import imports_router

# Create Ninja API
api = NinjaAPI(
    title='CRM Import Data Sources API',
    version=settings.APP_VERSION,
    description='REST API for staging uploaded files ahead of CRM bulk imports',
)

# Include routers with prefixes
api.add_router('/imports', imports_router, tags=['imports'])


# Health check endpoint
@api.get('/health')
def health_check(request):
    """Health check endpoint"""
    return {'status': 'ok', 'version': settings.APP_VERSION}


# URL patterns
urlpatterns = [
    # Admin interface
    path('admin/', admin.site.urls),

    # API endpoints
    path('api/v1/', api.urls),

    # Root endpoint with API info
    path('', lambda request: JsonResponse({
        'app': settings.APP_NAME,
        'version': settings.APP_VERSION,
        'docs': '/api/v1/docs',
    })),
]
