"""URL routing for messaging."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import MessageCreateView, MessageThreadViewSet

router = SimpleRouter()
router.register(r"threads", MessageThreadViewSet, basename="message-thread")

urlpatterns = [
    path("", MessageCreateView.as_view(), name="message-create"),
    path("", include(router.urls)),
]
