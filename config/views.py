"""Project-level views."""

from django.utils import timezone  # type: ignore
from rest_framework import permissions  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore


class HealthCheckView(APIView):
    """Liveness check; never touches the database."""

    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        return Response({
            'status': 'ok',
            'timestamp': timezone.now().isoformat(),
            'service': 'TripoStay API',
        })
