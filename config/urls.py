"""
URL configuration for the Job Portal API.
"""
from django.contrib import admin
from django.urls import path
from django.conf import settings
from django.conf.urls.static import static
from ninja import NinjaAPI

from apps.core.errors import register_exception_handlers

api = NinjaAPI(
    title="Job Portal API",
    version="1.0.0",
    description="Registration, sign-in, categories and job postings for the job portal",
    docs_url="/docs",
)
register_exception_handlers(api)

from apps.identity.api import router as identity_router
from apps.categories.api import router as categories_router
from apps.jobs.api import router as jobs_router

api.add_router("/v1/auth/", identity_router)
api.add_router("/v1/category/", categories_router)
api.add_router("/v1/job/", jobs_router)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', api.urls),
]

# Serve uploaded files in development
if settings.DEBUG:
    urlpatterns += static(
        getattr(settings, 'MEDIA_URL', '/media/'),
        document_root=getattr(settings, 'MEDIA_ROOT', settings.BASE_DIR / 'media')
    )
