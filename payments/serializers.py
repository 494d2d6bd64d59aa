from rest_framework import serializers

from core.constants import PaymentMethod, PaymentStatus
from users.serializers import UserSummarySerializer
from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    """Serializer for Payment with payer and booking summaries"""
    user = UserSummarySerializer(read_only=True)
    verified_by = UserSummarySerializer(read_only=True)
    assignment_reference = serializers.CharField(source='assignment.reference_number', read_only=True)
    room_number = serializers.CharField(source='assignment.room.number', read_only=True)
    proof_image = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = [
            'id', 'assignment', 'assignment_reference', 'room_number', 'user', 'amount',
            'method', 'reference_number', 'proof_image', 'status', 'verified_by', 'remarks',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_proof_image(self, obj):
        return obj.proof_image.url if obj.proof_image else None


class PaymentSubmitSerializer(serializers.Serializer):
    assignment_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    method = serializers.ChoiceField(choices=PaymentMethod.CHOICES)
    reference_number = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')


class PaymentVerifySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[PaymentStatus.VERIFIED, PaymentStatus.REJECTED])
    remarks = serializers.CharField(required=False, allow_blank=True)
