from django.db.models import QuerySet

from core.repositories import BaseRepository
from maintenance.models import MaintenanceRequest


class MaintenanceRepository(BaseRepository[MaintenanceRequest]):
    resource_name = 'Maintenance request'

    def __init__(self):
        super().__init__(MaintenanceRequest)

    def get_queryset(self) -> QuerySet[MaintenanceRequest]:
        return self.model.objects.select_related('room', 'requested_by', 'assigned_to').prefetch_related(
            'notes', 'notes__added_by'
        )
