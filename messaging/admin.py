from django.contrib import admin
from .models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ['sender', 'recipient', 'is_admin_message', 'is_read', 'created_at']
    list_filter = ['is_admin_message', 'is_read']
    search_fields = ['content', 'sender__name', 'recipient__name']
