"""URL routing for the properties domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import (
    PropertyAvailabilityView,
    PropertyImagesView,
    PropertyViewSet,
    SearchPropertiesView,
)

router = SimpleRouter()
router.register(r"", PropertyViewSet, basename="property")

urlpatterns = [
    # Declared before the router so "search" is not taken for a property pk
    path("search/", SearchPropertiesView.as_view(), name="property-search"),
    path(
        "<int:property_id>/images/",
        PropertyImagesView.as_view(),
        name="property-images",
    ),
    path(
        "<int:property_id>/availability/",
        PropertyAvailabilityView.as_view(),
        name="property-availability",
    ),
    path("", include(router.urls)),
]
