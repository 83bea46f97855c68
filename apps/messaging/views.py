"""API views for guest/host messaging."""

from __future__ import annotations

from django.db.models import Count, Prefetch, Q  # type: ignore
from rest_framework import generics, mixins, permissions, status, viewsets  # type: ignore
from rest_framework.exceptions import NotFound  # type: ignore
from rest_framework.response import Response  # type: ignore

from .models import Message, MessageThread
from .serializers import (
    MessageCreateSerializer,
    MessageSerializer,
    MessageThreadCreateSerializer,
    MessageThreadDetailSerializer,
    MessageThreadSerializer,
)
from .services import mark_thread_read, post_message, start_thread


class MessageThreadViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """Threads of the current user.

    Only participants can see a thread; anyone else gets 404.
    ``PATCH`` marks the messages addressed to the caller as read.
    """

    permission_classes = [permissions.IsAuthenticated]
    http_method_names = ["get", "post", "patch", "head", "options"]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        queryset = (
            MessageThread.objects.for_user(user)
            .select_related("guest", "host", "property")
            .annotate(
                unread_count=Count(
                    "messages",
                    filter=Q(messages__recipient=user, messages__is_read=False),
                )
            )
            .by_latest_activity()
        )
        if self.action in ("retrieve", "partial_update"):
            queryset = queryset.prefetch_related(
                Prefetch("messages", queryset=Message.objects.order_by("-created_at", "-id"))
            )
        return queryset

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return MessageThreadCreateSerializer
        if self.action in ("retrieve", "partial_update"):
            return MessageThreadDetailSerializer
        return MessageThreadSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        property_obj = data.get("property_id")
        thread = start_thread(
            request.user,
            guest_id=data["guest_id"].pk,
            host_id=data["host_id"].pk,
            property_id=property_obj.pk if property_obj else None,
        )
        read_serializer = MessageThreadSerializer(thread, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        thread = self.get_object()
        mark_thread_read(thread, request.user)
        thread = self.get_queryset().get(pk=thread.pk)
        return Response(self.get_serializer(thread).data)


class MessageCreateView(generics.CreateAPIView):
    """Post a message to one of the caller's threads."""

    permission_classes = [permissions.IsAuthenticated]
    serializer_class = MessageCreateSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        thread = (
            MessageThread.objects.for_user(request.user)
            .filter(pk=serializer.validated_data["thread_id"])
            .first()
        )
        if thread is None:
            raise NotFound("Thread not found.")
        message = post_message(thread, request.user, serializer.validated_data["content"])
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)
