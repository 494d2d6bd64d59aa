from decimal import Decimal

from django.conf import settings
from django.db import models

from common.uploads import unique_upload_path
from core.constants import AssignmentStatus
from rooms.models import Room


def id_document_upload_to(instance, filename):
    return unique_upload_path('ids', 'ID', filename)


class RoomAssignment(models.Model):
    """
    One tenant booking of one room, from request through checkout.
    Status changes go through AssignmentService so the room's occupancy follows.
    """
    reference_number = models.CharField(max_length=20, unique=True, editable=False)
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='assignments'
    )
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='assignments')

    start_date = models.DateField()
    end_date = models.DateField()
    id_image = models.FileField(upload_to=id_document_upload_to)

    status = models.CharField(max_length=10, choices=AssignmentStatus.CHOICES, default=AssignmentStatus.PENDING)
    notes = models.TextField(blank=True, default='')

    approval_time = models.DateTimeField(null=True, blank=True)
    check_in_time = models.DateTimeField(null=True, blank=True)
    check_out_time = models.DateTimeField(null=True, blank=True)
    checked_out_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )

    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Room Assignment"
        verbose_name_plural = "Room Assignments"
        indexes = [
            models.Index(fields=['requested_by', 'status'], name='assign_tenant_status_idx'),
            models.Index(fields=['room', 'status'], name='assign_room_status_idx'),
            models.Index(fields=['status', 'created_at'], name='assign_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.reference_number} - {self.room.number} ({self.get_status_display()})"

    @property
    def is_open(self):
        return self.status in AssignmentStatus.OPEN

    @property
    def holds_slot(self):
        return self.status in AssignmentStatus.OCCUPYING

    @property
    def check_in_reference(self):
        """When the stay started for reporting: check-in, else approval, else creation"""
        return self.check_in_time or self.approval_time or self.created_at
