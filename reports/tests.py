"""Tests for tenant reports."""
from __future__ import annotations

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from assignments.models import RoomAssignment
from core.constants import ApprovalStatus, AssignmentStatus, ReportCategory, ReportStatus, UserRole
from reports.models import Report
from reports.services import ReportService
from rooms.models import Room
from users.models import User


def make_user(email: str, role: str = UserRole.TENANT) -> User:
    return User.objects.create_user(
        email=email, password="secret123", name=email.split("@")[0].title(), role=role,
        approval_status=ApprovalStatus.APPROVED, is_email_verified=True,
    )


class ReportServiceTests(TestCase):
    def setUp(self) -> None:
        self.tenant = make_user("tenant@example.com")
        self.room = Room.objects.create(number="101", floor="1", capacity=2)

    def _book(self, booking_status: str) -> RoomAssignment:
        return RoomAssignment.objects.create(
            reference_number=f"REF-01012026-{booking_status[:6].upper()}", requested_by=self.tenant,
            room=self.room, start_date="2026-01-01", end_date="2026-01-31", id_image="ids/ID-test.png",
            status=booking_status,
        )

    def test_current_room_recorded(self) -> None:
        self._book(AssignmentStatus.ACTIVE)
        report = ReportService().submit_report(self.tenant, "  Noise  ", "Loud neighbours")
        self.assertEqual(report.current_room, self.room)
        self.assertEqual(report.title, "Noise")
        self.assertEqual(report.category, ReportCategory.OTHER)

    def test_pending_booking_is_not_a_current_room(self) -> None:
        self._book(AssignmentStatus.PENDING)
        report = ReportService().submit_report(self.tenant, "Noise", "Loud", ReportCategory.COMPLAINT)
        self.assertIsNone(report.current_room)
        self.assertEqual(report.category, ReportCategory.COMPLAINT)

    def test_resolving_stamps_reviewer(self) -> None:
        admin = make_user("admin@example.com", role=UserRole.ADMIN)
        report = ReportService().submit_report(self.tenant, "Noise", "Loud")

        report = ReportService().update_report(admin, report.id, ReportStatus.IN_REVIEW, "Looking into it")
        self.assertIsNone(report.resolved_at)

        report = ReportService().update_report(admin, report.id, ReportStatus.RESOLVED)
        self.assertEqual(report.resolved_by, admin)
        self.assertIsNotNone(report.resolved_at)
        self.assertEqual(report.admin_remarks, "Looking into it")


class ReportAPITests(APITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = make_user("admin@example.com", role=UserRole.ADMIN)
        self.tenant = make_user("tenant@example.com")

    def test_submit_and_list_own(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        response = self.client.post(reverse("report-list"), {
            "title": "Wifi down", "description": "No signal on floor 2", "category": ReportCategory.MAINTENANCE,
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["message"], "Report submitted successfully")
        self.assertEqual(response.data["data"]["status"], ReportStatus.PENDING)

        Report.objects.create(user=make_user("other@example.com"), title="Other", description="x")
        mine = self.client.get(reverse("report-my-reports"))
        self.assertEqual([row["title"] for row in mine.data], ["Wifi down"])

    def test_missing_title(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        response = self.client.post(reverse("report-list"), {"description": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_full_list_is_admin_only(self) -> None:
        Report.objects.create(user=self.tenant, title="Noise", description="Loud")
        self.client.force_authenticate(user=self.tenant)
        self.assertEqual(self.client.get(reverse("report-list")).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse("report-list"))
        self.assertEqual(response.data["count"], 1)

    def test_owner_reads_own_report_only(self) -> None:
        mine = Report.objects.create(user=self.tenant, title="Noise", description="Loud")
        theirs = Report.objects.create(user=make_user("other@example.com"), title="Other", description="x")
        self.client.force_authenticate(user=self.tenant)

        self.assertEqual(self.client.get(reverse("report-detail", args=[mine.id])).status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(reverse("report-detail", args=[theirs.id])).status_code,
                         status.HTTP_404_NOT_FOUND)

    def test_admin_updates_and_deletes(self) -> None:
        report = Report.objects.create(user=self.tenant, title="Noise", description="Loud")
        self.client.force_authenticate(user=self.admin)
        url = reverse("report-detail", args=[report.id])

        response = self.client.put(url, {"status": ReportStatus.RESOLVED, "admin_remarks": "Talked to them"},
                                   format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["resolved_by"]["id"], self.admin.id)

        response = self.client.put(url, {"status": "closed"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(url)
        self.assertEqual(response.data["message"], "Report deleted successfully")
        self.assertFalse(Report.objects.exists())
