from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from core.constants import MaintenanceStatus
from core.exceptions import ValidationError
from core.services import BaseService
from maintenance.models import MaintenanceRequest, MaintenanceNote
from maintenance.repositories import MaintenanceRepository
from rooms.repositories import RoomRepository


class MaintenanceService(BaseService):
    def __init__(self, repository: MaintenanceRepository = None):
        super().__init__()
        self.requests = repository or MaintenanceRepository()

    def create_request(self, user, room_id, description: str, priority: Optional[str] = None) -> MaintenanceRequest:
        room = RoomRepository().get_or_raise(room_id)
        fields = dict(room=room, requested_by=user, description=description)
        if priority:
            fields['priority'] = priority
        request = self.requests.create(**fields)
        self.log_info("Maintenance request created", request_id=request.id, room_id=room.id, user_id=user.id)
        return request

    @transaction.atomic
    def update_request(self, admin, request_id, status: Optional[str] = None, assigned_to_id=None,
                       note: Optional[str] = None) -> MaintenanceRequest:
        """Admin update; a note is appended, never replaced"""
        request = self.requests.lock(request_id)

        if status:
            request.status = status
            if status == MaintenanceStatus.COMPLETED:
                request.completed_at = timezone.now()

        if assigned_to_id:
            assignee = get_user_model().objects.filter(id=assigned_to_id).first()
            if assignee is None:
                raise ValidationError(message="Assignee not found", code="INVALID_ASSIGNEE",
                                      details={"assigned_to": assigned_to_id})
            request.assigned_to = assignee

        request.save()
        if note:
            MaintenanceNote.objects.create(request=request, text=note, added_by=admin)

        self.log_info("Maintenance request updated", request_id=request.id, status=request.status)
        return self.requests.get_queryset().get(id=request.id)
