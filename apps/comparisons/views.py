"""API views for the compare list."""

from __future__ import annotations

from django.conf import settings  # type: ignore

from apps.wishlists.views import SavedPropertyViewSet
from .models import CompareListItem


class CompareListViewSet(SavedPropertyViewSet):
    """Same contract as the wishlist, capped at ``COMPARE_LIST_LIMIT`` entries."""

    model = CompareListItem
    list_name = "compare list"
    full_error_code = "COMPARE_LIST_FULL"

    def get_limit(self):
        return settings.COMPARE_LIST_LIMIT
