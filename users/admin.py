from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Tenants and admins, keyed by email"""
    list_display = ['email', 'name', 'user_code', 'role', 'approval_status', 'is_blocked',
                    'is_email_verified', 'created_at']
    list_filter = ['role', 'approval_status', 'is_blocked', 'is_email_verified', 'is_temporary']
    search_fields = ['email', 'name', 'user_code', 'mobile_number']
    ordering = ['-created_at']
    readonly_fields = ['user_code', 'created_at', 'updated_at', 'last_login']

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Profile', {'fields': ('name', 'mobile_number', 'user_code')}),
        ('Role', {'fields': ('role', 'is_super_admin', 'approval_status', 'is_blocked')}),
        ('Verification', {'fields': ('is_email_verified', 'is_temporary', 'verification_code_expires')}),
        ('Django permissions', {'fields': ('is_active', 'is_staff', 'is_superuser'), 'classes': ('collapse',)}),
        ('Dates', {'fields': ('last_login', 'created_at', 'updated_at')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'name', 'role', 'password1', 'password2'),
        }),
    )
