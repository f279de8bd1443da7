from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.pagination import StandardPagination
from users.permissions import authorize
from .serializers import MarkReadSerializer, NotificationQuerySerializer, NotificationSerializer
from .services import NotificationService


class NotificationListView(generics.ListAPIView):
    """Notifications addressed to the current user, newest first."""

    serializer_class = NotificationSerializer
    pagination_class = StandardPagination

    def list(self, request, *args, **kwargs):
        authorize(request.user, "notification.list")
        return super().list(request, *args, **kwargs)

    def get_queryset(self):
        params = NotificationQuerySerializer(data=self.request.query_params)
        params.is_valid(raise_exception=True)
        return NotificationService.for_user(
            self.request.user,
            unread_only=params.validated_data["unread_only"],
            notification_type=params.validated_data.get("type"),
            priority=params.validated_data.get("priority"),
        )


class MarkReadView(APIView):
    def post(self, request):
        authorize(request.user, "notification.list")
        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = NotificationService.mark_read(
            request.user, serializer.validated_data["notification_ids"]
        )
        return Response({"updated": updated})


class MarkAllReadView(APIView):
    def post(self, request):
        authorize(request.user, "notification.list")
        return Response({"updated": NotificationService.mark_all_read(request.user)})


class UnreadCountView(APIView):
    def get(self, request):
        authorize(request.user, "notification.list")
        return Response({"unread": NotificationService.unread_count(request.user)})


class NotificationDeleteView(APIView):
    def delete(self, request, pk):
        authorize(request.user, "notification.list")
        NotificationService.delete_for_user(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ClearAllView(APIView):
    """Remove every non-urgent notification from the caller's inbox."""

    def delete(self, request):
        authorize(request.user, "notification.list")
        return Response({"deleted": NotificationService.clear_all(request.user)})
