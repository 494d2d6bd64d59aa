from rest_framework import serializers

from core.constants import ReportCategory, ReportStatus
from users.serializers import UserSummarySerializer
from .models import Report


class ReportRoomSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    number = serializers.CharField()
    room_type = serializers.CharField()
    monthly_rate = serializers.DecimalField(max_digits=10, decimal_places=2)


class ReportSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    current_room = ReportRoomSerializer(read_only=True)
    resolved_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Report
        fields = [
            'id', 'user', 'current_room', 'title', 'description', 'category', 'status',
            'admin_remarks', 'resolved_at', 'resolved_by', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ReportCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField()
    category = serializers.ChoiceField(choices=ReportCategory.CHOICES, required=False)


class ReportUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ReportStatus.CHOICES)
    admin_remarks = serializers.CharField(required=False, allow_blank=True)
