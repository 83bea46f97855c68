"""URL routing for the wishlist."""

from django.urls import path  # type: ignore

from .views import WishlistViewSet

urlpatterns = [
    path("", WishlistViewSet.as_view({"get": "list", "post": "create", "delete": "remove"}), name="wishlist"),
]
