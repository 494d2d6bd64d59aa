"""
URL configuration for dormhub project.
"""
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

# Import health check URLs
from common.health import get_health_urls

admin.site.site_header = "DormHub Administration"
admin.site.site_title = "DormHub Admin"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('api.urls')),  # API routes
]

# Add health check endpoints (for load balancers, monitoring)
urlpatterns += get_health_urls()

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
