from rest_framework import serializers

from core.constants import ApprovalStatus
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User"""
    is_admin = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = [
            'id', 'user_code', 'name', 'email', 'mobile_number', 'role',
            'approval_status', 'is_admin', 'is_super_admin', 'is_blocked',
            'is_email_verified', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """Lightweight serializer embedded in other resources"""

    class Meta:
        model = User
        fields = ['id', 'user_code', 'name', 'email', 'mobile_number']
        read_only_fields = fields


class RegistrationSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    mobile_number = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class VerifyCodeSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    code = serializers.CharField(max_length=6)


class UserIdSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()


class EmailSerializer(serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetSerializer(VerifyCodeSerializer):
    new_password = serializers.CharField(write_only=True)


class ApprovalStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ApprovalStatus.CHOICES)


class AdminBootstrapSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    admin_code = serializers.CharField(write_only=True)


class AdminCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class AdminUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150, required=False)
    email = serializers.EmailField(required=False)
    password = serializers.CharField(write_only=True, required=False)
