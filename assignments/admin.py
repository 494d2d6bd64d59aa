from django.contrib import admin
from .models import RoomAssignment


@admin.register(RoomAssignment)
class RoomAssignmentAdmin(admin.ModelAdmin):
    list_display = ['reference_number', 'requested_by', 'room', 'status', 'start_date', 'end_date',
                    'total_price', 'created_at']
    list_filter = ['status', 'room__floor']
    search_fields = ['reference_number', 'requested_by__name', 'requested_by__email', 'room__number']
    date_hierarchy = 'created_at'
    # Status changes must go through the API so room occupancy stays in sync
    readonly_fields = ['reference_number', 'status', 'approval_time', 'check_in_time', 'check_out_time',
                       'checked_out_by', 'created_at', 'updated_at']
