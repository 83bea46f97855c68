"""API views for the wishlist.

``SavedPropertyViewSet`` also backs the compare list, which only adds a
size limit.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.exceptions import NotFound, ValidationError  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.properties.models import Property
from shared.domain.exceptions import BusinessRuleError, ConflictError
from .models import WishlistItem
from .serializers import PropertyRefSerializer, SavedPropertySerializer

logger = logging.getLogger(__name__)


class SavedPropertyViewSet(viewsets.GenericViewSet):
    """
    GET lists the caller's entries, POST ``{property_id}`` adds one and
    DELETE ``?property_id=`` removes one.
    """

    permission_classes = [permissions.IsAuthenticated]
    serializer_class = SavedPropertySerializer
    model = None
    list_name = "list"
    limit = None
    full_error_code = "LIST_FULL"

    def get_limit(self):
        return self.limit

    def get_queryset(self):  # type: ignore
        return (
            self.model.objects.filter(user=self.request.user)
            .select_related("property")
            .prefetch_related("property__images")
        )

    def list(self, request):  # type: ignore
        queryset = self.get_queryset()
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)

    def create(self, request):  # type: ignore
        ref = PropertyRefSerializer(data=request.data)
        ref.is_valid(raise_exception=True)
        property_id = ref.validated_data["property_id"]

        property_obj = Property.objects.active().filter(pk=property_id).first()
        if property_obj is None:
            raise NotFound("Property not found.")

        entries = self.model.objects.filter(user=request.user)
        if entries.filter(property=property_obj).exists():
            raise ConflictError(f"Property is already in your {self.list_name}.", error_code="ALREADY_SAVED")
        limit = self.get_limit()
        if limit is not None and entries.count() >= limit:
            raise BusinessRuleError(
                f"Your {self.list_name} can hold at most {limit} properties.",
                error_code=self.full_error_code,
            )

        try:
            with transaction.atomic():
                entry = self.model.objects.create(user=request.user, property=property_obj)
        except IntegrityError as exc:
            raise ConflictError(
                f"Property is already in your {self.list_name}.", error_code="ALREADY_SAVED"
            ) from exc

        logger.info("User %s saved property %s to %s", request.user.pk, property_obj.pk, self.list_name)
        entry = self.get_queryset().get(pk=entry.pk)
        return Response(self.get_serializer(entry).data, status=status.HTTP_201_CREATED)

    def remove(self, request):  # type: ignore
        raw = request.query_params.get("property_id")
        if not raw:
            raise ValidationError({"property_id": "This query parameter is required."})
        ref = PropertyRefSerializer(data={"property_id": raw})
        ref.is_valid(raise_exception=True)

        deleted, _ = self.model.objects.filter(
            user=request.user, property_id=ref.validated_data["property_id"]
        ).delete()
        if not deleted:
            raise NotFound(f"Property is not in your {self.list_name}.")
        return Response(status=status.HTTP_204_NO_CONTENT)


class WishlistViewSet(SavedPropertyViewSet):
    model = WishlistItem
    list_name = "wishlist"
