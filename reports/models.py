from django.conf import settings
from django.db import models

from core.constants import ReportCategory, ReportStatus
from rooms.models import Room


class Report(models.Model):
    """
    Tenant report or complaint. current_room is captured at submission
    from the tenant's approved or active booking.
    """
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reports')
    current_room = models.ForeignKey(Room, on_delete=models.SET_NULL, null=True, blank=True, related_name='reports')
    title = models.CharField(max_length=200)
    description = models.TextField()
    category = models.CharField(max_length=15, choices=ReportCategory.CHOICES, default=ReportCategory.OTHER)
    status = models.CharField(max_length=15, choices=ReportStatus.CHOICES, default=ReportStatus.PENDING)
    admin_remarks = models.TextField(blank=True, default='')
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Report"
        verbose_name_plural = "Reports"
        indexes = [
            models.Index(fields=['user', 'status'], name='report_user_status_idx'),
            models.Index(fields=['status', 'created_at'], name='report_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.get_status_display()})"
