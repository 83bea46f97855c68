"""Property API views."""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore
from django.db.models import Max  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import generics, permissions, serializers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings import services as ledger
from shared.infrastructure.filters import SortByOrderingFilter
from .filters import PropertyFilterSet
from .models import Property, PropertyImage
from .serializers import (
    AvailabilityDateSerializer,
    AvailabilityQuerySerializer,
    AvailabilityUpdateSerializer,
    ImageDeleteSerializer,
    ImageReorderSerializer,
    ImageUploadSerializer,
    PropertyAccessInfoSerializer,
    PropertyImageSerializer,
    PropertySerializer,
    PropertyWriteSerializer,
)

logger = logging.getLogger(__name__)

PROPERTY_ORDERING_FIELDS = ["id", "title", "daily_price", "created_at", "average_rating"]


class IsPropertyOwnerOrAdmin(permissions.BasePermission):
    """Anyone may read; hosts create listings; only the owner (or staff) changes one."""

    message = "Only the property host can perform this action."

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        if getattr(view, "action", None) == "create":
            if not (user.is_host or user.is_staff):
                self.message = "Only hosts can create properties."
                return False
        return True

    def has_object_permission(self, request, view, obj: Property):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if getattr(user, "is_staff", False):
            return True
        return obj.host_id == user.id


class PropertyViewSet(viewsets.ModelViewSet):
    """Listing CRUD. Reads show active listings plus the caller's own."""

    permission_classes = [IsPropertyOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend, SortByOrderingFilter]
    filterset_class = PropertyFilterSet
    ordering_fields = PROPERTY_ORDERING_FIELDS
    ordering = ["-created_at"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):  # type: ignore
        qs = Property.objects.with_rating().select_related("host").prefetch_related("images")
        if self.request.method in permissions.SAFE_METHODS:
            return qs.visible_to(self.request.user)
        return qs

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "partial_update"}:
            return PropertyWriteSerializer
        return PropertySerializer

    def _read_response(self, instance: Property, status_code: int) -> Response:
        instance = self.get_queryset().get(pk=instance.pk)
        data = PropertySerializer(instance, context=self.get_serializer_context()).data
        return Response(data, status=status_code)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        instance = serializer.save(host=request.user)
        logger.info("Host %s listed property %s", request.user.pk, instance.pk)
        return self._read_response(instance, status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return self._read_response(instance, status.HTTP_200_OK)

    def perform_destroy(self, instance: Property):  # type: ignore
        # Stays keep pointing at their listing, so a booked property is retired instead.
        if instance.bookings.exists():
            instance.is_active = False
            instance.save(update_fields=["is_active", "updated_at"])
            logger.info("Property %s has bookings, deactivated instead of deleted", instance.pk)
            return
        instance.delete()

    @action(detail=True, methods=["get"], url_path="access-info", permission_classes=[permissions.IsAuthenticated])
    def access_info(self, request, pk=None):  # type: ignore
        """Check-in instructions for the host and guests holding a confirmed stay."""
        property_obj = self.get_object()
        user = request.user

        if not (property_obj.is_hosted_by(user) or user.is_staff):
            from apps.bookings.models import Booking

            has_stay = Booking.objects.filter(
                property=property_obj,
                guest=user,
                status__in=[Booking.Status.CONFIRMED, Booking.Status.COMPLETED],
            ).exists()
            if not has_stay:
                raise PermissionDenied("Check-in instructions are shared with confirmed guests only.")

        logger.info("User %s read check-in instructions of property %s", user.pk, property_obj.pk)
        return Response(PropertyAccessInfoSerializer(property_obj).data)


class SearchPropertiesView(generics.ListAPIView):
    """Search active listings with filters, availability window and sorting."""

    serializer_class = PropertySerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend, SortByOrderingFilter]
    filterset_class = PropertyFilterSet
    ordering_fields = PROPERTY_ORDERING_FIELDS
    ordering = ["-created_at"]

    def get_queryset(self):  # type: ignore
        return (
            Property.objects.active()
            .with_rating()
            .select_related("host")
            .prefetch_related("images")
        )


class PropertyCalendarMixin:
    """Resolves ``property_id`` from the URL and checks object permissions on it."""

    property_lookup_url_kwarg = "property_id"
    permission_classes = [permissions.IsAuthenticatedOrReadOnly, IsPropertyOwnerOrAdmin]

    def initial(self, request, *args, **kwargs):  # type: ignore
        super().initial(request, *args, **kwargs)
        property_id = kwargs.get(self.property_lookup_url_kwarg)
        queryset = Property.objects.all()
        if request.method in permissions.SAFE_METHODS:
            queryset = queryset.visible_to(request.user)
        self.property_object = get_object_or_404(queryset, pk=property_id)
        self.check_object_permissions(request, self.property_object)

    def get_property(self) -> Property:
        return self.property_object


class PropertyImagesView(PropertyCalendarMixin, APIView):
    """List, add, reorder and delete the images of a listing."""

    def get(self, request, property_id):  # type: ignore
        images = self.get_property().images.all()
        return Response(PropertyImageSerializer(images, many=True).data)

    def post(self, request, property_id):  # type: ignore
        serializer = ImageUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        property_obj = self.get_property()
        urls = serializer.validated_data["image_urls"]
        make_primary = serializer.validated_data["is_primary"]

        with transaction.atomic():
            last_order = property_obj.images.aggregate(last=Max("display_order"))["last"]
            next_order = 0 if last_order is None else last_order + 1
            if make_primary:
                property_obj.images.filter(is_primary=True).update(is_primary=False)
            created = PropertyImage.objects.bulk_create(
                [
                    PropertyImage(
                        property=property_obj,
                        image_url=url,
                        # only the first uploaded image can become primary
                        is_primary=make_primary and index == 0,
                        display_order=next_order + index,
                    )
                    for index, url in enumerate(urls)
                ]
            )

        created_ids = [image.pk for image in created if image.pk]
        images = property_obj.images.filter(pk__in=created_ids) if created_ids else created
        return Response(PropertyImageSerializer(images, many=True).data, status=status.HTTP_201_CREATED)

    def patch(self, request, property_id):  # type: ignore
        serializer = ImageReorderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        pairs = serializer.validated_data["image_order_pairs"]
        property_obj = self.get_property()

        images = property_obj.images.in_bulk([pair["image_id"] for pair in pairs])
        unknown = sorted({pair["image_id"] for pair in pairs} - set(images))
        if unknown:
            raise serializers.ValidationError(
                {"image_order_pairs": f"Images {unknown} do not belong to this property."}
            )
        for pair in pairs:
            images[pair["image_id"]].display_order = pair["display_order"]
        PropertyImage.objects.bulk_update(images.values(), ["display_order"])
        return Response({"message": "Images reordered successfully"})

    def delete(self, request, property_id):  # type: ignore
        serializer = ImageDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.get_property().images.filter(pk__in=serializer.validated_data["image_ids"]).delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class PropertyAvailabilityView(PropertyCalendarMixin, APIView):
    """Read the explicit calendar rows of a listing, or let its host set them."""

    def get(self, request, property_id):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        rows = self.get_property().availability_dates.all()
        if query.validated_data.get("start_date"):
            rows = rows.filter(date__gte=query.validated_data["start_date"])
        if query.validated_data.get("end_date"):
            rows = rows.filter(date__lte=query.validated_data["end_date"])
        return Response(AvailabilityDateSerializer(rows, many=True).data)

    def post(self, request, property_id):  # type: ignore
        serializer = AvailabilityUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entries = [(entry["date"], entry["is_available"]) for entry in serializer.validated_data["dates"]]
        rows = ledger.set_dates(self.get_property(), entries)
        return Response(AvailabilityDateSerializer(rows, many=True).data, status=status.HTTP_201_CREATED)
