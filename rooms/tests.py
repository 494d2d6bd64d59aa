"""Tests for the room inventory."""
from __future__ import annotations

import shutil
import tempfile
from itertools import count

from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import IntegrityError, transaction
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from assignments.lifecycle import RoomMutation
from assignments.models import RoomAssignment
from core.constants import ApprovalStatus, AssignmentStatus, RoomStatus, UserRole
from core.exceptions import CapacityExceededError
from rooms.models import Room
from rooms.repositories import RoomRepository
from rooms.services import RoomService, parse_amenities
from users.models import User

MEDIA_ROOT = tempfile.mkdtemp()
_refs = count(1)


def picture(name: str = "room.png") -> SimpleUploadedFile:
    return SimpleUploadedFile(name, b"\x89PNG\r\n\x1a\n" + b"0" * 32, content_type="image/png")


def make_user(email: str, role: str = UserRole.TENANT) -> User:
    return User.objects.create_user(
        email=email, password="secret123", name=email.split("@")[0].title(), role=role,
        approval_status=ApprovalStatus.APPROVED, is_email_verified=True,
    )


def book(room: Room, tenant: User, booking_status: str = AssignmentStatus.APPROVED) -> RoomAssignment:
    return RoomAssignment.objects.create(
        reference_number=f"REF-01012026-{next(_refs):06d}", requested_by=tenant, room=room,
        start_date="2026-01-01", end_date="2026-01-31", id_image="ids/ID-test.png", status=booking_status,
    )


class ParseAmenitiesTests(SimpleTestCase):
    def test_accepted_shapes(self) -> None:
        self.assertEqual(parse_amenities(["wifi", " fan "]), ["wifi", "fan"])
        self.assertEqual(parse_amenities('["wifi", "aircon"]'), ["wifi", "aircon"])
        self.assertEqual(parse_amenities("wifi, aircon,"), ["wifi", "aircon"])
        self.assertEqual(parse_amenities("wifi"), ["wifi"])
        self.assertIsNone(parse_amenities(None))


class RoomRepositoryTests(TestCase):
    def test_increment_refuses_full_room(self) -> None:
        room = Room.objects.create(number="101", floor="1", capacity=1, occupied=1, status=RoomStatus.OCCUPIED)
        # The caller's copy still believes a slot is free
        room.occupied = 0
        mutation = RoomMutation(delta=1, occupied=1, status=RoomStatus.OCCUPIED)

        with self.assertRaises(CapacityExceededError):
            RoomRepository().apply_mutation(room, mutation)

        room.refresh_from_db()
        self.assertEqual(room.occupied, 1)

    def test_increment_and_release(self) -> None:
        room = Room.objects.create(number="102", floor="1", capacity=2)
        tenant = make_user("tenant@example.com")
        repository = RoomRepository()

        repository.apply_mutation(room, RoomMutation(delta=1, occupied=1, status=RoomStatus.AVAILABLE,
                                                     tenant_id=tenant.id))
        self.assertEqual(room.occupied, 1)
        self.assertEqual(list(room.current_occupants.all()), [tenant])

        repository.apply_mutation(room, RoomMutation(delta=-1, occupied=0, status=RoomStatus.AVAILABLE,
                                                     tenant_id=tenant.id))
        self.assertEqual(room.occupied, 0)
        self.assertFalse(room.current_occupants.exists())

    def test_database_rejects_overfull_room(self) -> None:
        with self.assertRaises(IntegrityError), transaction.atomic():
            Room.objects.create(number="105", floor="1", capacity=1, occupied=2)

        with self.assertRaises(IntegrityError), transaction.atomic():
            Room.objects.create(number="106", floor="1", capacity=7)

        self.assertFalse(Room.objects.filter(number__in=["105", "106"]).exists())


class ReconcileTests(TestCase):
    def test_counts_are_rebuilt_from_bookings(self) -> None:
        tenant = make_user("tenant@example.com")
        drifted = Room.objects.create(number="101", floor="1", capacity=1, occupied=0)
        book(drifted, tenant)
        stale = Room.objects.create(number="102", floor="1", capacity=2, occupied=2, status=RoomStatus.OCCUPIED)
        Room.objects.create(number="103", floor="1", capacity=2)

        self.assertEqual(RoomService().reconcile_occupancy(), 2)

        drifted.refresh_from_db()
        self.assertEqual(drifted.occupied, 1)
        self.assertEqual(drifted.status, RoomStatus.OCCUPIED)
        self.assertEqual(list(drifted.current_occupants.all()), [tenant])

        stale.refresh_from_db()
        self.assertEqual(stale.occupied, 0)
        self.assertEqual(stale.status, RoomStatus.AVAILABLE)

        self.assertEqual(RoomService().reconcile_occupancy(), 0)

    def test_maintenance_status_survives(self) -> None:
        room = Room.objects.create(number="104", floor="1", capacity=2, occupied=1, status=RoomStatus.MAINTENANCE)
        RoomService().reconcile_occupancy()
        room.refresh_from_db()
        self.assertEqual(room.occupied, 0)
        self.assertEqual(room.status, RoomStatus.MAINTENANCE)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class RoomAPITests(APITestCase):
    """Verify room endpoints and their rules."""

    @classmethod
    def tearDownClass(cls) -> None:
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self) -> None:
        super().setUp()
        self.admin = make_user("admin@example.com", role=UserRole.ADMIN)
        self.tenant = make_user("tenant@example.com")
        self.client.force_authenticate(user=self.admin)

    def test_create_room_with_images(self) -> None:
        response = self.client.post(reverse("room-list"), {
            "number": "a-101",
            "floor": "1",
            "capacity": 2,
            "monthly_rate": "4500.00",
            "amenities": "wifi, aircon",
            "images": [picture("one.png"), picture("two.png")],
        }, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["number"], "A-101")
        self.assertEqual(response.data["status"], RoomStatus.AVAILABLE)
        self.assertEqual(response.data["amenities"], ["wifi", "aircon"])
        self.assertEqual(len(response.data["images"]), 2)

    def test_duplicate_number(self) -> None:
        Room.objects.create(number="101", floor="1", capacity=2)
        response = self.client.post(reverse("room-list"), {"number": "101", "floor": "2", "capacity": 1},
                                    format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "ROOM_EXISTS")

    def test_invalid_room_number(self) -> None:
        response = self.client.post(reverse("room-list"), {"number": "10 1", "floor": "1", "capacity": 1},
                                    format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_ROOM_NUMBER")

    def test_capacity_out_of_range(self) -> None:
        response = self.client.post(reverse("room-list"), {"number": "101", "floor": "1", "capacity": 7},
                                    format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_tenant_cannot_create(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        response = self.client.post(reverse("room-list"), {"number": "101", "floor": "1", "capacity": 1},
                                    format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_full_room_cannot_be_marked_available(self) -> None:
        room = Room.objects.create(number="101", floor="1", capacity=1, occupied=1, status=RoomStatus.OCCUPIED)
        book(room, self.tenant)
        response = self.client.patch(reverse("room-detail", args=[room.id]),
                                     {"status": RoomStatus.AVAILABLE}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "ROOM_FULL")

    def test_room_with_space_cannot_be_marked_occupied(self) -> None:
        room = Room.objects.create(number="101", floor="1", capacity=2)
        response = self.client.patch(reverse("room-detail", args=[room.id]),
                                     {"status": RoomStatus.OCCUPIED}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "ROOM_NOT_FULL")

    def test_capacity_cannot_drop_below_occupancy(self) -> None:
        room = Room.objects.create(number="101", floor="1", capacity=3, occupied=2)
        book(room, self.tenant)
        book(room, make_user("other@example.com"))
        response = self.client.patch(reverse("room-detail", args=[room.id]), {"capacity": 1}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "CAPACITY_BELOW_OCCUPANCY")

    def test_shrinking_to_occupancy_fills_room(self) -> None:
        room = Room.objects.create(number="101", floor="1", capacity=3, occupied=2)
        book(room, self.tenant)
        book(room, make_user("other@example.com"))
        response = self.client.patch(reverse("room-detail", args=[room.id]), {"capacity": 2}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], RoomStatus.OCCUPIED)

    def test_update_drops_unlisted_images(self) -> None:
        created = self.client.post(reverse("room-list"), {
            "number": "101", "floor": "1", "capacity": 2,
            "images": [picture("one.png"), picture("two.png")],
        }, format="multipart")
        keep = created.data["images"][0]["id"]

        response = self.client.patch(reverse("room-detail", args=[created.data["id"]]), {
            "existing_images": [str(keep)],
            "images": [picture("three.png")],
        }, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["images"]), 2)
        self.assertEqual(response.data["images"][0]["id"], keep)

    def test_delete_rules(self) -> None:
        room = Room.objects.create(number="101", floor="1", capacity=2)
        booking = book(room, self.tenant, AssignmentStatus.PENDING)

        response = self.client.delete(reverse("room-detail", args=[room.id]))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "ROOM_IN_USE")

        booking.status = AssignmentStatus.REJECTED
        booking.save()
        response = self.client.delete(reverse("room-detail", args=[room.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Room.objects.filter(id=room.id).exists())

    def test_public_listings_need_no_login(self) -> None:
        Room.objects.create(number="101", floor="1", capacity=2)
        Room.objects.create(number="102", floor="1", capacity=1, occupied=1, status=RoomStatus.OCCUPIED)
        self.client.force_authenticate(user=None)

        everything = self.client.get(reverse("room-public"))
        self.assertEqual(everything.status_code, status.HTTP_200_OK)
        self.assertEqual(len(everything.data), 2)
        self.assertNotIn("current_occupants", everything.data[0])

        available = self.client.get(reverse("room-public-available"))
        self.assertEqual([row["number"] for row in available.data], ["101"])

    def test_list_requires_login(self) -> None:
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse("room-list"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_filters_by_status(self) -> None:
        Room.objects.create(number="101", floor="1", capacity=2)
        Room.objects.create(number="201", floor="2", capacity=2, status=RoomStatus.MAINTENANCE)
        self.client.force_authenticate(user=self.tenant)

        response = self.client.get(reverse("room-list"), {"status": RoomStatus.MAINTENANCE})
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["number"], "201")

    def test_my_room(self) -> None:
        room = Room.objects.create(number="101", floor="1", capacity=2)
        old = book(room, self.tenant, AssignmentStatus.COMPLETED)
        current = book(room, self.tenant, AssignmentStatus.PENDING)
        self.client.force_authenticate(user=self.tenant)

        response = self.client.get(reverse("room-my-room"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["current_assignment"]["id"], current.id)
        self.assertEqual([row["id"] for row in response.data["history"]], [old.id])

    def test_reconcile_endpoint(self) -> None:
        room = Room.objects.create(number="101", floor="1", capacity=2, occupied=2, status=RoomStatus.OCCUPIED)
        response = self.client.post(reverse("room-reconcile"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["rooms_changed"], 1)
        room.refresh_from_db()
        self.assertEqual(room.occupied, 0)
