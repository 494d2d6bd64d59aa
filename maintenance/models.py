from django.conf import settings
from django.db import models

from core.constants import MaintenancePriority, MaintenanceStatus
from rooms.models import Room


class MaintenanceRequest(models.Model):
    """Repair request raised against a room"""
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='maintenance_requests')
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='maintenance_requests'
    )
    description = models.TextField()
    priority = models.CharField(
        max_length=10, choices=MaintenancePriority.CHOICES, default=MaintenancePriority.MEDIUM
    )
    status = models.CharField(max_length=15, choices=MaintenanceStatus.CHOICES, default=MaintenanceStatus.PENDING)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    completed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Maintenance Request"
        verbose_name_plural = "Maintenance Requests"
        indexes = [
            models.Index(fields=['requested_by', 'status'], name='maint_user_status_idx'),
            models.Index(fields=['room', 'status'], name='maint_room_status_idx'),
        ]

    def __str__(self):
        return f"Room {self.room.number} - {self.get_priority_display()} ({self.get_status_display()})"


class MaintenanceNote(models.Model):
    request = models.ForeignKey(MaintenanceRequest, on_delete=models.CASCADE, related_name='notes')
    text = models.TextField()
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['timestamp', 'id']

    def __str__(self):
        return self.text[:50]
