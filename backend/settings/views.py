from rest_framework.response import Response
from rest_framework.views import APIView

from users.permissions import authorize
from .config import app_settings
from .serializers import SiteSettingsSerializer, PublicRestaurantInfoSerializer


class SiteSettingsView(APIView):
    """
    Read (staff/admin) or change (admin) the site configuration.
    """

    def get(self, request):
        authorize(request.user, "settings.view")
        return Response(SiteSettingsSerializer(app_settings.get()).data)

    def put(self, request):
        return self._update(request, partial=False)

    def patch(self, request):
        return self._update(request, partial=True)

    def _update(self, request, partial):
        authorize(request.user, "settings.update")
        serializer = SiteSettingsSerializer(
            app_settings.get(), data=request.data, partial=partial
        )
        serializer.is_valid(raise_exception=True)
        settings_obj = app_settings.update(request.user, serializer.validated_data)
        return Response(SiteSettingsSerializer(settings_obj).data)


class PublicRestaurantInfoView(APIView):
    authentication_classes = []

    def get(self, request):
        return Response(PublicRestaurantInfoSerializer(app_settings.get()).data)
