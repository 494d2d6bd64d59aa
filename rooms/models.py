from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator, RegexValidator
from django.db import models

from assignments.lifecycle import derive_room_status
from common.uploads import unique_upload_path
from core.constants import RoomType, RoomStatus, DefaultLimits


def room_image_upload_to(instance, filename):
    return unique_upload_path('rooms', 'ROOM', filename)


class Room(models.Model):
    """Dormitory room with a bounded number of slots"""
    number = models.CharField(
        max_length=20,
        unique=True,
        validators=[RegexValidator(r'^[A-Z0-9-]+$', 'Room number can only contain letters, numbers, and hyphens')],
        help_text="e.g., '101', 'A-12'"
    )
    floor = models.CharField(
        max_length=5,
        validators=[RegexValidator(r'^[0-9]+$', 'Floor must be a number')]
    )
    capacity = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(DefaultLimits.MIN_ROOM_CAPACITY),
                    MaxValueValidator(DefaultLimits.MAX_ROOM_CAPACITY)]
    )
    occupied = models.PositiveSmallIntegerField(default=0)

    room_type = models.CharField(max_length=10, choices=RoomType.CHOICES, default=RoomType.STANDARD)
    status = models.CharField(max_length=15, choices=RoomStatus.CHOICES, default=RoomStatus.AVAILABLE)
    monthly_rate = models.DecimalField(
        max_digits=10, decimal_places=2,
        default=Decimal(DefaultLimits.DEFAULT_MONTHLY_RATE),
        validators=[MinValueValidator(0)]
    )
    description = models.TextField(blank=True, default='')
    amenities = models.JSONField(default=list, blank=True)

    current_occupants = models.ManyToManyField(
        settings.AUTH_USER_MODEL, related_name='current_rooms', blank=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['floor', 'number']
        verbose_name = "Room"
        verbose_name_plural = "Rooms"
        indexes = [
            models.Index(fields=['status'], name='rooms_status_idx'),
            models.Index(fields=['floor', 'number'], name='rooms_floor_number_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(occupied__lte=models.F('capacity')),
                name='room_occupied_within_capacity',
            ),
            models.CheckConstraint(
                condition=models.Q(capacity__gte=DefaultLimits.MIN_ROOM_CAPACITY,
                                   capacity__lte=DefaultLimits.MAX_ROOM_CAPACITY),
                name='room_capacity_in_range',
            ),
        ]

    def __str__(self):
        return f"Room {self.number} (floor {self.floor}, {self.occupied}/{self.capacity})"

    def save(self, *args, **kwargs):
        if self.number:
            self.number = self.number.upper()
        super().save(*args, **kwargs)

    @property
    def available_slots(self):
        return max(0, self.capacity - self.occupied)

    @property
    def is_full(self):
        return self.occupied >= self.capacity

    def refresh_status(self):
        """Recompute status from occupancy without saving"""
        self.status = derive_room_status(self.occupied, self.capacity, self.status)
        return self.status


class RoomImage(models.Model):
    """Uploaded photo of a room"""
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='images')
    image = models.FileField(upload_to=room_image_upload_to)
    position = models.PositiveSmallIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['position', 'id']
        verbose_name = "Room Image"
        verbose_name_plural = "Room Images"

    def __str__(self):
        return f"{self.room.number} image {self.position}"
