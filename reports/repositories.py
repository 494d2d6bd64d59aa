from django.db.models import QuerySet

from core.repositories import BaseRepository
from reports.models import Report


class ReportRepository(BaseRepository[Report]):
    resource_name = 'Report'

    def __init__(self):
        super().__init__(Report)

    def get_queryset(self) -> QuerySet[Report]:
        return self.model.objects.select_related('user', 'current_room', 'resolved_by')

    def for_user(self, user) -> QuerySet[Report]:
        return self.get_queryset().filter(user=user)
