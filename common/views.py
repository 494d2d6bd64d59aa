"""
Dormitory-wide payment settings: readable by anyone, editable by admins.
"""
import logging

from django.db import transaction
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api.permissions import IsAdmin
from core.validators import UploadValidator
from .models import SystemSettings
from .serializers import SystemSettingsSerializer
from .uploads import delete_stored_file

logger = logging.getLogger(__name__)


class SystemSettingsView(APIView):
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsAuthenticated(), IsAdmin()]

    def get(self, request):
        return Response(SystemSettingsSerializer(SystemSettings.load()).data)

    @transaction.atomic
    def put(self, request):
        system_settings = SystemSettings.load()
        serializer = SystemSettingsSerializer(system_settings, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        qr_code = request.FILES.get('payment_qr_code') or request.FILES.get('qrCode')
        replaced = None
        if qr_code:
            UploadValidator.validate_image(qr_code, 'payment_qr_code')
            replaced = system_settings.payment_qr_code.name
            system_settings.payment_qr_code = qr_code

        serializer.save()
        if replaced:
            transaction.on_commit(lambda: delete_stored_file(replaced))

        logger.info(f"System settings updated by user {request.user.id}")
        return Response(SystemSettingsSerializer(SystemSettings.load()).data)

    def patch(self, request):
        return self.put(request)
