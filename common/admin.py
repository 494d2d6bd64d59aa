from django.contrib import admin
from .models import SystemSettings


@admin.register(SystemSettings)
class SystemSettingsAdmin(admin.ModelAdmin):
    """Singleton, edit the single row instead of adding new ones"""
    list_display = ['gcash_name', 'gcash_number', 'updated_at']
    readonly_fields = ['updated_at']

    def has_add_permission(self, request):
        return not SystemSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
