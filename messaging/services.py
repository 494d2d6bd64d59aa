from typing import List, Optional

from django.contrib.auth import get_user_model

from core.exceptions import ValidationError
from core.services import BaseService
from messaging.models import Message
from messaging.repositories import MessageRepository


class MessageService(BaseService):
    def __init__(self, repository: MessageRepository = None):
        super().__init__()
        self.messages = repository or MessageRepository()

    def send_message(self, sender, content: str, recipient_id=None) -> Message:
        """Admins write to one tenant, tenants always write to the admins"""
        content = (content or '').strip()
        if not content:
            raise ValidationError(message="Message content is required", code="EMPTY_MESSAGE")

        recipient = None
        if sender.is_admin:
            if not recipient_id:
                raise ValidationError(message="Admins must specify a recipient", code="RECIPIENT_REQUIRED")
            recipient = get_user_model().objects.filter(id=recipient_id).first()
            if recipient is None:
                raise ValidationError(message="Recipient not found", code="INVALID_RECIPIENT",
                                      details={"recipient_id": recipient_id})

        message = self.messages.create(
            sender=sender, recipient=recipient, content=content, is_admin_message=sender.is_admin
        )
        self.log_info("Message sent", message_id=message.id, sender_id=sender.id,
                      recipient_id=recipient.id if recipient else None)
        return message

    def conversation_for(self, user, tenant_id=None):
        if user.is_admin:
            if not tenant_id:
                raise ValidationError(message="User ID required to view a conversation", code="USER_REQUIRED")
            return self.messages.conversation(tenant_id)
        return self.messages.conversation(user.id)

    def conversations(self) -> List[dict]:
        """Latest message and unread count per tenant, most recent first"""
        summaries = {}
        for message in self.messages.get_queryset().order_by('-created_at', '-id'):
            tenant_id = message.tenant_id
            if tenant_id is None:
                continue
            summary = summaries.get(tenant_id)
            if summary is None:
                tenant = message.recipient if message.is_admin_message else message.sender
                summary = summaries[tenant_id] = {
                    'user_id': tenant_id,
                    'user_name': tenant.name,
                    'user_email': tenant.email,
                    'user_code': tenant.user_code,
                    'last_message_content': message.content,
                    'last_message_time': message.created_at,
                    'unread_count': 0,
                }
            if not message.is_admin_message and not message.is_read:
                summary['unread_count'] += 1
        return list(summaries.values())

    def mark_read(self, user, tenant_id: Optional[int] = None) -> int:
        """Admins read a tenant's messages, tenants read the admins' replies"""
        if user.is_admin:
            if not tenant_id:
                raise ValidationError(message="User ID required to mark messages read", code="USER_REQUIRED")
            unread = self.messages.unread_from_tenant(tenant_id)
        else:
            unread = self.messages.unread_for_tenant(user.id)
        return unread.update(is_read=True)
