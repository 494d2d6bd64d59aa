from django.contrib import admin
from .models import Report


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ['title', 'user', 'current_room', 'category', 'status', 'created_at']
    list_filter = ['status', 'category']
    search_fields = ['title', 'description', 'user__name', 'user__email']
    readonly_fields = ['resolved_at', 'resolved_by', 'created_at', 'updated_at']
