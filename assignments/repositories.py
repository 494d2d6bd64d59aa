from datetime import datetime
from typing import Optional

from django.db.models import F, Q, QuerySet
from django.db.models.functions import Coalesce

from core.constants import AssignmentStatus
from core.repositories import BaseRepository
from assignments.models import RoomAssignment


class AssignmentRepository(BaseRepository[RoomAssignment]):
    resource_name = 'Assignment'

    def __init__(self):
        super().__init__(RoomAssignment)

    def get_queryset(self) -> QuerySet[RoomAssignment]:
        return self.model.objects.select_related('requested_by', 'room', 'checked_out_by')

    def for_tenant(self, user) -> QuerySet[RoomAssignment]:
        return self.get_queryset().filter(requested_by=user)

    def pending(self) -> QuerySet[RoomAssignment]:
        return self.get_queryset().filter(status=AssignmentStatus.PENDING)

    def open_for_tenant(self, user, lock=False) -> Optional[RoomAssignment]:
        queryset = self.model.objects.filter(requested_by=user, status__in=AssignmentStatus.OPEN)
        if lock:
            queryset = queryset.select_for_update()
        return queryset.first()

    def holding_slots_for_tenant(self, user) -> QuerySet[RoomAssignment]:
        return self.model.objects.select_for_update().filter(
            requested_by=user, status__in=AssignmentStatus.OCCUPYING
        )

    def reference_taken(self, reference: str) -> bool:
        return self.model.objects.filter(reference_number=reference).exists()

    def transactions(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> QuerySet[RoomAssignment]:
        """
        Bookings whose stay touches [start, end]: check-in inside, check-out
        inside, or a stay that began before and had not ended by start.
        Without a range every booking is returned. Newest check-outs first.
        """
        queryset = self.get_queryset().annotate(
            stay_start=Coalesce('check_in_time', 'approval_time')
        )
        if start is not None and end is not None:
            ongoing = Q(check_out_time__isnull=True, status__in=AssignmentStatus.OCCUPYING)
            queryset = queryset.filter(
                Q(stay_start__gte=start, stay_start__lte=end)
                | Q(check_out_time__gte=start, check_out_time__lte=end)
                | (Q(stay_start__lte=end) & (Q(check_out_time__gte=start) | ongoing))
            )
        return queryset.order_by(F('check_out_time').desc(nulls_last=True), '-created_at')
