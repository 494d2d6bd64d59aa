from rest_framework import serializers

from .models import SystemSettings


class SystemSettingsSerializer(serializers.ModelSerializer):
    payment_qr_code = serializers.SerializerMethodField()

    class Meta:
        model = SystemSettings
        fields = ['payment_qr_code', 'gcash_name', 'gcash_number', 'payment_instructions', 'updated_at']
        read_only_fields = ['payment_qr_code', 'updated_at']

    def get_payment_qr_code(self, obj):
        return obj.payment_qr_code.url if obj.payment_qr_code else None
