from typing import Optional

from django.db import transaction
from django.utils import timezone

from assignments.repositories import AssignmentRepository
from core.constants import AssignmentStatus, ReportStatus
from core.services import BaseService
from reports.models import Report
from reports.repositories import ReportRepository


class ReportService(BaseService):
    def __init__(self, repository: ReportRepository = None):
        super().__init__()
        self.reports = repository or ReportRepository()

    def submit_report(self, user, title: str, description: str, category: Optional[str] = None) -> Report:
        current = AssignmentRepository().get_all(
            requested_by=user, status__in=AssignmentStatus.OCCUPYING
        ).order_by('-created_at').first()

        fields = dict(
            user=user,
            current_room_id=current.room_id if current else None,
            title=title.strip(),
            description=description.strip(),
        )
        if category:
            fields['category'] = category
        report = self.reports.create(**fields)
        self.log_info("Report submitted", report_id=report.id, user_id=user.id, room_id=fields['current_room_id'])
        return self.reports.get_queryset().get(id=report.id)

    @transaction.atomic
    def update_report(self, admin, report_id, status: str, admin_remarks: Optional[str] = None) -> Report:
        report = self.reports.lock(report_id)
        report.status = status
        if admin_remarks:
            report.admin_remarks = admin_remarks
        if status == ReportStatus.RESOLVED:
            report.resolved_at = timezone.now()
            report.resolved_by = admin
        report.save()
        self.log_info("Report updated", report_id=report.id, status=status, admin_id=admin.id)
        return self.reports.get_queryset().get(id=report.id)
