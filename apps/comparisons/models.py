"""Compare list: a short list of properties shown side by side."""

from __future__ import annotations

from django.db import models  # type: ignore

from apps.wishlists.models import SavedProperty


class CompareListItem(SavedProperty):
    class Meta(SavedProperty.Meta):
        constraints = [
            models.UniqueConstraint(fields=['user', 'property'], name='compare_list_unique_user_property'),
        ]
