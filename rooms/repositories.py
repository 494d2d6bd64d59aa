from django.db.models import F, QuerySet
from django.utils import timezone

from assignments.lifecycle import RoomMutation
from core.constants import AssignmentStatus, RoomStatus
from core.exceptions import CapacityExceededError
from core.repositories import BaseRepository
from rooms.models import Room, RoomImage


class RoomRepository(BaseRepository[Room]):
    resource_name = 'Room'

    def __init__(self):
        super().__init__(Room)

    def get_queryset(self) -> QuerySet[Room]:
        return self.model.objects.prefetch_related('images')

    def available(self) -> QuerySet[Room]:
        return self.get_queryset().filter(status=RoomStatus.AVAILABLE)

    def number_taken(self, number: str, exclude_id: int = None) -> bool:
        queryset = self.model.objects.filter(number=number.upper())
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    def held_slots(self, room: Room) -> int:
        return room.assignments.filter(status__in=AssignmentStatus.OCCUPYING).count()

    def apply_mutation(self, room: Room, mutation: RoomMutation) -> Room:
        """
        Persist an occupancy change on a row locked by the caller.
        Increments only succeed while a slot is free at the database level.
        """
        now = timezone.now()
        if mutation.adds_occupant:
            updated = self.model.objects.filter(id=room.id, occupied__lt=F('capacity')).update(
                occupied=F('occupied') + 1, status=mutation.status, updated_at=now
            )
            if not updated:
                raise CapacityExceededError(
                    message="Room is already at full capacity",
                    details={"room_id": room.id}
                )
            if mutation.tenant_id:
                room.current_occupants.add(mutation.tenant_id)
        else:
            self.model.objects.filter(id=room.id).update(
                occupied=mutation.occupied, status=mutation.status, updated_at=now
            )
            if mutation.tenant_id:
                room.current_occupants.remove(mutation.tenant_id)

        room.refresh_from_db(fields=['occupied', 'status', 'updated_at'])
        return room


class RoomImageRepository(BaseRepository[RoomImage]):
    resource_name = 'Room image'

    def __init__(self):
        super().__init__(RoomImage)
