from django.contrib import admin
from .models import Room, RoomImage


class RoomImageInline(admin.TabularInline):
    model = RoomImage
    extra = 0


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ['number', 'floor', 'room_type', 'capacity', 'occupied', 'status', 'monthly_rate']
    list_filter = ['status', 'room_type', 'floor']
    search_fields = ['number', 'description']
    # Occupancy follows bookings; edit it through the reconcile command instead
    readonly_fields = ['occupied', 'created_at', 'updated_at']
    filter_horizontal = ['current_occupants']
    inlines = [RoomImageInline]
