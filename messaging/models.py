from django.conf import settings
from django.db import models


class Message(models.Model):
    """
    Chat message between a tenant and the admins. A tenant message has
    no recipient and is addressed to every admin.
    """
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sent_messages')
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, null=True, blank=True, related_name='received_messages'
    )
    content = models.TextField()
    is_admin_message = models.BooleanField(default=False)
    is_read = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['sender', 'created_at'], name='message_sender_created_idx'),
            models.Index(fields=['recipient', 'created_at'], name='message_recip_created_idx'),
        ]

    def __str__(self):
        return f"{self.sender} -> {self.recipient or 'admins'}: {self.content[:30]}"

    @property
    def tenant_id(self):
        """The tenant whose conversation this message belongs to"""
        return self.recipient_id if self.is_admin_message else self.sender_id
