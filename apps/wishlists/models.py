"""Saved-property lists.

``SavedProperty`` is the shape shared by the wishlist and the compare
list: a user bookmarks a property once. Duplicates are prevented via a
unique constraint on each concrete list.
"""

from __future__ import annotations

from django.db import models  # type: ignore


class SavedProperty(models.Model):
    user = models.ForeignKey('users.CustomUser', on_delete=models.CASCADE, related_name='+')
    property = models.ForeignKey('properties.Property', on_delete=models.CASCADE, related_name='+')
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ['-added_at', '-id']

    def __str__(self) -> str:
        return f"Property {self.property_id} saved by user {self.user_id}"


class WishlistItem(SavedProperty):
    """A property the user wants to remember."""

    class Meta(SavedProperty.Meta):
        constraints = [
            models.UniqueConstraint(fields=['user', 'property'], name='wishlist_unique_user_property'),
        ]
