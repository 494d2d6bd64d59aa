from django.db.models import Q, QuerySet

from core.repositories import BaseRepository
from messaging.models import Message


class MessageRepository(BaseRepository[Message]):
    resource_name = 'Message'

    def __init__(self):
        super().__init__(Message)

    def get_queryset(self) -> QuerySet[Message]:
        return self.model.objects.select_related('sender', 'recipient')

    def conversation(self, tenant_id) -> QuerySet[Message]:
        """Tenant to admins and admins to tenant, oldest first"""
        return self.get_queryset().filter(
            Q(sender_id=tenant_id, recipient__isnull=True) | Q(recipient_id=tenant_id, is_admin_message=True)
        ).order_by('created_at', 'id')

    def unread_from_tenant(self, tenant_id) -> QuerySet[Message]:
        return self.model.objects.filter(sender_id=tenant_id, is_admin_message=False, is_read=False)

    def unread_for_tenant(self, tenant_id) -> QuerySet[Message]:
        return self.model.objects.filter(recipient_id=tenant_id, is_admin_message=True, is_read=False)
