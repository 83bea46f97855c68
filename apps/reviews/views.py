"""API views for managing reviews."""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import mixins, permissions, serializers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.exceptions import ConflictError
from shared.infrastructure.filters import SortByOrderingFilter
from .models import Review
from .serializers import (
    ReviewCreateSerializer,
    ReviewFlagSerializer,
    ReviewSearchSerializer,
    ReviewSerializer,
)

logger = logging.getLogger(__name__)


class ReviewViewSet(mixins.CreateModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Reviews of completed or confirmed stays.

    - ``create`` lets a guest review one of their own stays, once
    - ``search`` lists the published reviews of one property
    - ``flag`` hides a review pending moderation
    """

    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    filter_backends = [SortByOrderingFilter]
    ordering_fields = ['id', 'rating', 'created_at', 'updated_at']
    ordering = ['-created_at', '-id']

    def get_queryset(self):  # type: ignore
        return Review.objects.published().select_related('reviewer')

    def get_serializer_class(self):  # type: ignore
        if self.action == 'create':
            return ReviewCreateSerializer
        if self.action == 'flag':
            return ReviewFlagSerializer
        return ReviewSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        """Create a review for one of the caller's stays."""
        from apps.bookings.models import Booking

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = Booking.objects.filter(
            pk=data['booking_id'],
            guest=request.user,
            status__in=[Booking.Status.CONFIRMED, Booking.Status.COMPLETED],
        ).first()
        if booking is None:
            raise serializers.ValidationError(
                {'booking_id': 'You can only review your own confirmed or completed stays.'}
            )
        if Review.objects.filter(booking=booking).exists():
            raise ConflictError('This booking has already been reviewed.', error_code='REVIEW_EXISTS')

        try:
            with transaction.atomic():
                review = Review.objects.create(
                    property_id=booking.property_id,
                    booking=booking,
                    reviewer=request.user,
                    rating=data['rating'],
                    comment=data['comment'],
                    is_anonymous=data['is_anonymous'],
                )
        except IntegrityError as exc:
            raise ConflictError('This booking has already been reviewed.', error_code='REVIEW_EXISTS') from exc

        logger.info('User %s reviewed booking %s', request.user.pk, booking.pk)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'], permission_classes=[permissions.AllowAny])
    def search(self, request):  # type: ignore
        """Published reviews of ``?property_id=``; sortable with ``sort_by``/``sort_order``."""
        params = ReviewSearchSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        queryset = self.filter_queryset(
            self.get_queryset().filter(property_id=params.validated_data['property_id'])
        )
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(ReviewSerializer(page, many=True).data)
        return Response(ReviewSerializer(queryset, many=True).data)

    @action(detail=True, methods=['post'], permission_classes=[permissions.IsAuthenticated])
    def flag(self, request, pk=None):  # type: ignore
        """Report a review; it disappears from search until moderated."""
        review = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review.is_flagged = True
        review.flag_reason = serializer.validated_data['reason']
        review.flagged_by = request.user
        review.flagged_at = timezone.now()
        review.save(update_fields=['is_flagged', 'flag_reason', 'flagged_by', 'flagged_at', 'updated_at'])
        logger.info('User %s flagged review %s', request.user.pk, review.pk)
        return Response({'id': review.pk, 'is_flagged': True, 'message': 'Review flagged for moderation'})
