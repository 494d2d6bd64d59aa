from django.contrib import admin
from .models import MaintenanceRequest, MaintenanceNote


class MaintenanceNoteInline(admin.TabularInline):
    model = MaintenanceNote
    extra = 0
    readonly_fields = ['timestamp']


@admin.register(MaintenanceRequest)
class MaintenanceRequestAdmin(admin.ModelAdmin):
    list_display = ['room', 'requested_by', 'priority', 'status', 'assigned_to', 'created_at']
    list_filter = ['status', 'priority']
    search_fields = ['description', 'room__number', 'requested_by__name']
    readonly_fields = ['completed_at', 'created_at', 'updated_at']
    inlines = [MaintenanceNoteInline]
