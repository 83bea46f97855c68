"""Models for the review domain.

A guest reviews a property once per stay: each ``Review`` belongs to
exactly one booking. Flagged reviews stay in the database for
moderation but are hidden from search and from rating averages.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class ReviewQuerySet(models.QuerySet):
    def published(self):
        return self.filter(is_flagged=False)


class Review(models.Model):
    """Represents a review left by a guest for a property."""

    property = models.ForeignKey(
        'properties.Property', on_delete=models.CASCADE, related_name='reviews'
    )
    booking = models.OneToOneField(
        'bookings.Booking', on_delete=models.CASCADE, related_name='review'
    )
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews'
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text=_('Rating from 1 to 5'),
    )
    comment = models.TextField(blank=True)
    is_anonymous = models.BooleanField(default=False)

    # Moderation
    is_flagged = models.BooleanField(default=False)
    flag_reason = models.CharField(max_length=500, blank=True)
    flagged_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='flagged_reviews',
    )
    flagged_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ReviewQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(rating__gte=1, rating__lte=5),
                name='review_rating_between_1_and_5',
            ),
        ]
        indexes = [
            models.Index(fields=['property', '-created_at']),
            models.Index(fields=['reviewer']),
            models.Index(fields=['rating']),
        ]

    def __str__(self) -> str:
        return f"Review by {self.reviewer_id} for property {self.property_id} (Rating: {self.rating})"
