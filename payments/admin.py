from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['assignment', 'user', 'amount', 'method', 'status', 'verified_by', 'created_at']
    list_filter = ['status', 'method']
    search_fields = ['reference_number', 'assignment__reference_number', 'user__name', 'user__email']
    readonly_fields = ['created_at', 'updated_at']
