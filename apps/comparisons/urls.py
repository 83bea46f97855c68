"""URL routing for the compare list."""

from django.urls import path  # type: ignore

from .views import CompareListViewSet

urlpatterns = [
    path("", CompareListViewSet.as_view({"get": "list", "post": "create", "delete": "remove"}), name="compare-list"),
]
