from django.conf import settings
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base import BaseViewSet
from .models import User
from .permissions import OperationPermission, authorize
from .serializers import (
    AccountCreateSerializer,
    AdminAccountCreateSerializer,
    StaffAccountCreateSerializer,
    UserAdminSerializer,
    UserSerializer,
    WaiterSerializer,
)
from .services import UserService


class CurrentUserView(APIView):
    """Return or update the profile of the authenticated user."""

    def get(self, request):
        authorize(request.user, "user.me")
        return Response(UserSerializer(request.user).data)

    def patch(self, request):
        authorize(request.user, "user.me")
        serializer = UserSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class WaiterListView(generics.ListAPIView):
    serializer_class = WaiterSerializer
    pagination_class = None

    def get_queryset(self):
        return UserService.list_waiters(self.request.user)


class RegisterView(APIView):
    """
    Public guest sign-up. Responds with the new profile and a token pair,
    and sets the access cookie so the browser is logged in straight away.
    """

    def post(self, request):
        serializer = AccountCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserService.register(serializer.validated_data)
        tokens = UserService.generate_tokens_for_user(user)

        response = Response(
            {"user": UserSerializer(user).data, **tokens},
            status=status.HTTP_201_CREATED,
        )
        response.set_cookie(
            key=settings.SIMPLE_JWT["AUTH_COOKIE"],
            value=tokens["access"],
            max_age=int(settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"].total_seconds()),
            httponly=settings.SIMPLE_JWT["AUTH_COOKIE_HTTP_ONLY"],
            secure=settings.SIMPLE_JWT["AUTH_COOKIE_SECURE"],
            samesite=settings.SIMPLE_JWT["AUTH_COOKIE_SAMESITE"],
        )
        return response


class CreateAdminView(APIView):
    def post(self, request):
        authorize(request.user, "user.create_admin")
        serializer = AdminAccountCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        secret_key = data.pop("admin_secret_key")
        user = UserService.create_admin(request.user, data, secret_key)
        return Response(UserAdminSerializer(user).data, status=status.HTTP_201_CREATED)


class UserViewSet(BaseViewSet):
    """
    Admin user management. Every action goes through ``UserService`` so the
    role rules (no admin promotion, no self-deactivation, admins cannot be
    deleted) hold for the API and the shell alike.
    """

    queryset = User.objects.all()
    serializer_class = UserAdminSerializer
    permission_classes = [OperationPermission]
    operation_roles = {
        "create": "user.manage",
        "update": "user.manage",
        "partial_update": "user.manage",
        "destroy": "user.manage",
    }
    filterset_fields = ["role", "is_active"]
    search_fields = ["email", "name", "phone"]
    ordering_fields = ["email", "name", "date_joined"]
    ordering = ["name", "email"]

    def get_queryset(self):
        if self.action == "list":
            return UserService.list_users(self.request.user)
        return super().get_queryset()

    def retrieve(self, request, *args, **kwargs):
        user = UserService.get_user(request.user, self.kwargs["pk"])
        return Response(self.get_serializer(user).data)

    def create(self, request, *args, **kwargs):
        serializer = StaffAccountCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserService.create_user(request.user, serializer.validated_data)
        return Response(self.get_serializer(user).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        user = UserService.find_user(self.kwargs["pk"])
        serializer = self.get_serializer(user, data=request.data, partial=kwargs.get("partial", False))
        serializer.is_valid(raise_exception=True)
        user = UserService.update_user(request.user, user, serializer.validated_data)
        return Response(self.get_serializer(user).data)

    def destroy(self, request, *args, **kwargs):
        UserService.delete_user(request.user, UserService.find_user(self.kwargs["pk"]))
        return Response(status=status.HTTP_204_NO_CONTENT)
