"""User API views."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import mixins, permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .serializers import PublicUserSerializer, UserSerializer

User = get_user_model()


class UserViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """User profiles.

    - ``profile`` reads and updates the caller's own profile
    - ``retrieve`` returns anyone's public profile
    - the list is reserved to platform staff
    """

    queryset = User.objects.filter(is_active=True)

    def get_permissions(self):  # type: ignore
        if self.action == "retrieve":
            return [permissions.AllowAny()]
        if self.action == "profile":
            return [permissions.IsAuthenticated()]
        return [permissions.IsAdminUser()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "retrieve":
            return PublicUserSerializer
        return UserSerializer

    @action(detail=False, methods=["get", "patch"])
    def profile(self, request):
        """Return or partially update the current user's profile."""
        if request.method == "GET":
            return Response(UserSerializer(request.user).data)
        serializer = UserSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
