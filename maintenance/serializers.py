from rest_framework import serializers

from core.constants import MaintenancePriority, MaintenanceStatus
from users.serializers import UserSummarySerializer
from .models import MaintenanceRequest, MaintenanceNote


class MaintenanceNoteSerializer(serializers.ModelSerializer):
    added_by = serializers.CharField(source='added_by.name', read_only=True, default=None)

    class Meta:
        model = MaintenanceNote
        fields = ['id', 'text', 'added_by', 'timestamp']
        read_only_fields = fields


class MaintenanceRequestSerializer(serializers.ModelSerializer):
    """Serializer for MaintenanceRequest with room, people and notes"""
    room_number = serializers.CharField(source='room.number', read_only=True)
    room_floor = serializers.CharField(source='room.floor', read_only=True)
    requested_by = UserSummarySerializer(read_only=True)
    assigned_to = UserSummarySerializer(read_only=True)
    notes = MaintenanceNoteSerializer(many=True, read_only=True)

    class Meta:
        model = MaintenanceRequest
        fields = [
            'id', 'room', 'room_number', 'room_floor', 'requested_by', 'description',
            'priority', 'status', 'assigned_to', 'notes', 'completed_at', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class MaintenanceCreateSerializer(serializers.Serializer):
    room_id = serializers.IntegerField()
    description = serializers.CharField()
    priority = serializers.ChoiceField(choices=MaintenancePriority.CHOICES, required=False)


class MaintenanceUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=MaintenanceStatus.CHOICES, required=False)
    assigned_to = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
