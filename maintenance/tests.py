"""Tests for maintenance requests."""
from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from core.constants import ApprovalStatus, MaintenancePriority, MaintenanceStatus, UserRole
from maintenance.models import MaintenanceNote, MaintenanceRequest
from rooms.models import Room
from users.models import User


def make_user(email: str, role: str = UserRole.TENANT) -> User:
    return User.objects.create_user(
        email=email, password="secret123", name=email.split("@")[0].title(), role=role,
        approval_status=ApprovalStatus.APPROVED, is_email_verified=True,
    )


class MaintenanceAPITests(APITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = make_user("admin@example.com", role=UserRole.ADMIN)
        self.tenant = make_user("tenant@example.com")
        self.room = Room.objects.create(number="101", floor="1", capacity=2)

    def _raise(self, user: User, **extra) -> MaintenanceRequest:
        return MaintenanceRequest.objects.create(room=self.room, requested_by=user, description="Leaking tap", **extra)

    def test_tenant_raises_request(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        response = self.client.post(reverse("maintenance-list"), {
            "room_id": self.room.id, "description": "Broken fan", "priority": MaintenancePriority.HIGH,
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], MaintenanceStatus.PENDING)
        self.assertEqual(response.data["priority"], MaintenancePriority.HIGH)
        self.assertEqual(response.data["room_number"], "101")

    def test_default_priority(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        response = self.client.post(reverse("maintenance-list"), {
            "room_id": self.room.id, "description": "Door squeaks",
        }, format="json")
        self.assertEqual(response.data["priority"], MaintenancePriority.MEDIUM)

    def test_unknown_room(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        response = self.client.post(reverse("maintenance-list"), {
            "room_id": 999, "description": "Broken fan",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "Room not found")

    def test_tenants_see_only_their_requests(self) -> None:
        mine = self._raise(self.tenant)
        theirs = self._raise(make_user("other@example.com"))

        self.client.force_authenticate(user=self.tenant)
        response = self.client.get(reverse("maintenance-list"))
        self.assertEqual([row["id"] for row in response.data["results"]], [mine.id])
        response = self.client.get(reverse("maintenance-detail", args=[theirs.id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.get(reverse("maintenance-list")).data["count"], 2)

    def test_admin_update_appends_notes(self) -> None:
        request = self._raise(self.tenant)
        self.client.force_authenticate(user=self.admin)
        url = reverse("maintenance-detail", args=[request.id])

        self.client.patch(url, {"status": MaintenanceStatus.IN_PROGRESS, "assigned_to": self.admin.id,
                                "notes": "Plumber booked"}, format="json")
        response = self.client.patch(url, {"status": MaintenanceStatus.COMPLETED, "notes": "Fixed"},
                                     format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], MaintenanceStatus.COMPLETED)
        self.assertIsNotNone(response.data["completed_at"])
        self.assertEqual(response.data["assigned_to"]["id"], self.admin.id)
        self.assertEqual([note["text"] for note in response.data["notes"]], ["Plumber booked", "Fixed"])
        self.assertEqual(response.data["notes"][0]["added_by"], "Admin")

    def test_unknown_assignee(self) -> None:
        request = self._raise(self.tenant)
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(reverse("maintenance-detail", args=[request.id]),
                                     {"assigned_to": 999}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_ASSIGNEE")
        self.assertFalse(MaintenanceNote.objects.exists())

    def test_tenant_cannot_update_or_delete(self) -> None:
        request = self._raise(self.tenant)
        self.client.force_authenticate(user=self.tenant)
        url = reverse("maintenance-detail", args=[request.id])
        self.assertEqual(self.client.patch(url, {"status": MaintenanceStatus.COMPLETED}, format="json").status_code,
                         status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_deletes(self) -> None:
        request = self._raise(self.tenant)
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(reverse("maintenance-detail", args=[request.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(MaintenanceRequest.objects.exists())
