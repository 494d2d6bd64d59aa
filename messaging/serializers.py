from rest_framework import serializers

from users.serializers import UserSummarySerializer
from .models import Message


class MessageSerializer(serializers.ModelSerializer):
    sender = UserSummarySerializer(read_only=True)

    class Meta:
        model = Message
        fields = ['id', 'sender', 'recipient', 'content', 'is_admin_message', 'is_read', 'created_at']
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField()
    recipient_id = serializers.IntegerField(required=False, allow_null=True)


class ConversationSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    user_name = serializers.CharField()
    user_email = serializers.EmailField()
    user_code = serializers.CharField()
    last_message_content = serializers.CharField()
    last_message_time = serializers.DateTimeField()
    unread_count = serializers.IntegerField()
