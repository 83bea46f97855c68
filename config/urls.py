"""URL configuration for the TripoStay project.

The `urlpatterns` list routes URLs to views. It includes the Django admin,
the versioned REST API of each app and the OpenAPI schema.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

from .views import HealthCheckView

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    # Application URLs
    path('api/v1/auth/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/v1/users/', include('apps.users.urls')),
    path('api/v1/properties/', include('apps.properties.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/reviews/', include('apps.reviews.urls')),
    path('api/v1/messages/', include('apps.messaging.urls')),
    path('api/v1/user/wishlist/', include('apps.wishlists.urls')),
    path('api/v1/compare_lists/', include('apps.comparisons.urls')),
    path('api/v1/health/', HealthCheckView.as_view(), name='health'),
    # API docs
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
