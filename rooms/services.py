"""
Room inventory: create/update/delete with image handling, and the
occupancy reconcile sweep.
"""
import json
from typing import Iterable, List, Optional

from django.db import transaction

from core.constants import AssignmentStatus, RoomStatus
from core.dto import RoomDTO
from core.exceptions import ConflictError, InvalidStateError, ValidationError
from core.services import BaseService
from core.validators import RoomValidator, UploadValidator
from common.uploads import delete_stored_file
from assignments.lifecycle import derive_room_status
from rooms.models import Room
from rooms.repositories import RoomRepository, RoomImageRepository


def parse_amenities(value) -> Optional[List[str]]:
    """Accept a list, a JSON encoded list or a comma separated string"""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        items = value
    else:
        text = str(value).strip()
        try:
            items = json.loads(text)
        except ValueError:
            items = text.split(',')
        if not isinstance(items, list):
            items = [items]
    return [str(item).strip() for item in items if str(item).strip()]


class RoomService(BaseService):
    def __init__(self, repository: RoomRepository = None):
        super().__init__()
        self.rooms = repository or RoomRepository()
        self.images = RoomImageRepository()

    @transaction.atomic
    def create_room(self, data: RoomDTO, uploads: Iterable = ()) -> Room:
        uploads = list(uploads or [])
        if not data.number or not data.floor or data.capacity is None:
            raise ValidationError(
                message="Please provide room number, floor and capacity",
                code="MISSING_FIELDS"
            )
        number = RoomValidator.normalize_number(data.number)
        floor = RoomValidator.validate_floor(data.floor)
        RoomValidator.validate_capacity(data.capacity)
        UploadValidator.validate_image_count(len(uploads))
        for upload in uploads:
            UploadValidator.validate_image(upload, 'images')

        if self.rooms.number_taken(number):
            raise ConflictError(message=f"Room {number} already exists", code="ROOM_EXISTS")

        fields = dict(
            number=number,
            floor=floor,
            capacity=data.capacity,
            occupied=0,
            description=data.description or '',
            amenities=data.amenities or [],
        )
        if data.room_type:
            fields['room_type'] = data.room_type
        if data.monthly_rate is not None:
            fields['monthly_rate'] = data.monthly_rate
        fields['status'] = derive_room_status(0, data.capacity, data.status or RoomStatus.AVAILABLE)

        room = self.rooms.create(**fields)
        self._store_images(room, uploads)
        self.log_info("Room created", room_id=room.id, number=room.number)
        return room

    @transaction.atomic
    def update_room(self, room_id, data: RoomDTO, keep_image_ids: Optional[List[int]] = None,
                    uploads: Iterable = ()) -> Room:
        """
        Update a room. keep_image_ids lists the stored images to keep,
        None keeps all of them. Dropped images are removed from storage.
        """
        uploads = list(uploads or [])
        room = self.rooms.lock(room_id)
        held = self.rooms.held_slots(room)

        capacity = room.capacity if data.capacity is None else data.capacity
        if data.capacity is not None:
            RoomValidator.validate_capacity(capacity, max(held, room.occupied))

        if data.status == RoomStatus.AVAILABLE and held >= capacity:
            raise InvalidStateError(
                message="Cannot set a fully occupied room to available",
                code="ROOM_FULL",
                details={"occupied": held, "capacity": capacity}
            )
        if data.status == RoomStatus.OCCUPIED and held < capacity:
            raise InvalidStateError(
                message="Cannot set room to occupied. The room is not fully occupied yet.",
                code="ROOM_NOT_FULL",
                details={"occupied": held, "capacity": capacity}
            )

        if data.number:
            number = RoomValidator.normalize_number(data.number)
            if self.rooms.number_taken(number, exclude_id=room.id):
                raise ConflictError(message=f"Room {number} already exists", code="ROOM_EXISTS")
            room.number = number
        if data.floor:
            room.floor = RoomValidator.validate_floor(data.floor)
        if data.room_type:
            room.room_type = data.room_type
        if data.monthly_rate is not None:
            room.monthly_rate = data.monthly_rate
        if data.description is not None:
            room.description = data.description
        if data.amenities is not None:
            room.amenities = data.amenities

        room.capacity = capacity
        if data.status:
            room.status = data.status
        else:
            room.refresh_status()

        existing = list(room.images.all())
        if keep_image_ids is not None:
            keep = set(keep_image_ids)
            removed = [image for image in existing if image.id not in keep]
            existing = [image for image in existing if image.id in keep]
        else:
            removed = []

        UploadValidator.validate_image_count(len(existing) + len(uploads))
        for upload in uploads:
            UploadValidator.validate_image(upload, 'images')

        room.save()
        for image in removed:
            self._delete_image(image)
        self._store_images(room, uploads, start=len(existing))

        self.log_info("Room updated", room_id=room.id, removed_images=len(removed), new_images=len(uploads))
        return room

    @transaction.atomic
    def delete_room(self, room_id):
        room = self.rooms.lock(room_id)
        if room.assignments.filter(status__in=AssignmentStatus.OPEN).exists():
            raise ConflictError(
                message="Cannot delete room with active or pending assignments",
                code="ROOM_IN_USE"
            )
        if room.occupied > 0:
            raise ConflictError(message="Cannot delete room with current occupants", code="ROOM_OCCUPIED")

        for image in room.images.all():
            self._delete_image(image)
        self.rooms.delete(room)
        self.log_info("Room deleted", room_id=room_id)

    def _store_images(self, room, uploads, start=0):
        for offset, upload in enumerate(uploads):
            self.images.create(room=room, image=upload, position=start + offset)

    def _delete_image(self, image):
        name = image.image.name
        self.images.delete(image)
        transaction.on_commit(lambda: delete_stored_file(name))

    # Queries

    def my_room(self, user):
        """Current open booking and past bookings of a tenant"""
        assignments = list(
            user.assignments.select_related('room').order_by('-created_at')
        )
        current = next((a for a in assignments if a.status in AssignmentStatus.OPEN), None)
        history = [a for a in assignments if a.status not in AssignmentStatus.OPEN]
        return current, history

    # Sweep

    @transaction.atomic
    def reconcile_occupancy(self) -> int:
        """
        Recount slot-holding bookings per room and rewrite occupancy,
        occupants and status to match. Returns the number of rooms changed.
        """
        changed = 0
        for room in self.rooms.get_all().select_for_update():
            occupied = self.rooms.held_slots(room)
            if occupied > room.capacity:
                self.log_warning("Room holds more bookings than slots", room_id=room.id,
                                 held=occupied, capacity=room.capacity)
                occupied = room.capacity
            status = derive_room_status(occupied, room.capacity, room.status)

            tenant_ids = set(
                room.assignments.filter(status__in=AssignmentStatus.OCCUPYING)
                .values_list('requested_by_id', flat=True)
            )
            current_ids = set(room.current_occupants.values_list('id', flat=True))

            if occupied != room.occupied or status != room.status or tenant_ids != current_ids:
                self.rooms.model.objects.filter(id=room.id).update(occupied=occupied, status=status)
                room.current_occupants.set(tenant_ids)
                changed += 1

        self.log_info("Occupancy reconciled", rooms_changed=changed)
        return changed
