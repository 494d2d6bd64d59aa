from rest_framework import serializers

from core.constants import AssignmentStatus
from users.serializers import UserSummarySerializer
from .models import RoomAssignment


class RoomSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    number = serializers.CharField()
    floor = serializers.CharField()
    room_type = serializers.CharField()
    capacity = serializers.IntegerField()
    occupied = serializers.IntegerField()
    monthly_rate = serializers.DecimalField(max_digits=10, decimal_places=2)


class RoomAssignmentSerializer(serializers.ModelSerializer):
    """Serializer for RoomAssignment with tenant and room summaries"""
    requested_by = UserSummarySerializer(read_only=True)
    room = RoomSummarySerializer(read_only=True)
    checked_out_by = UserSummarySerializer(read_only=True)
    id_image = serializers.SerializerMethodField()

    class Meta:
        model = RoomAssignment
        fields = [
            'id', 'reference_number', 'requested_by', 'room', 'start_date', 'end_date',
            'id_image', 'status', 'notes', 'approval_time', 'check_in_time',
            'check_out_time', 'checked_out_by', 'total_price', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_id_image(self, obj):
        return obj.id_image.url if obj.id_image else None


class RoomAssignmentListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list view"""
    tenant_name = serializers.CharField(source='requested_by.name', read_only=True)
    tenant_code = serializers.CharField(source='requested_by.user_code', read_only=True)
    room_number = serializers.CharField(source='room.number', read_only=True)

    class Meta:
        model = RoomAssignment
        fields = [
            'id', 'reference_number', 'tenant_name', 'tenant_code', 'room_number',
            'start_date', 'end_date', 'status', 'total_price', 'approval_time',
            'check_in_time', 'check_out_time', 'created_at'
        ]
        read_only_fields = fields


class AssignmentCreateSerializer(serializers.Serializer):
    room_id = serializers.IntegerField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False,
                                           allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, data):
        if data['end_date'] < data['start_date']:
            raise serializers.ValidationError({'end_date': 'End date cannot be before start date'})
        return data


class AssignmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=AssignmentStatus.CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True)


class TransactionRangeSerializer(serializers.Serializer):
    startDate = serializers.DateField(required=False)
    endDate = serializers.DateField(required=False)

    def validate(self, data):
        start, end = data.get('startDate'), data.get('endDate')
        if start and end and end < start:
            raise serializers.ValidationError({'endDate': 'End date cannot be before start date'})
        return data
