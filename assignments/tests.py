"""Tests for the booking lifecycle and room occupancy."""
from __future__ import annotations

import re
import shutil
import tempfile
from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from assignments.lifecycle import (
    compute_total_price,
    stay_length_days,
    synchronize_occupancy,
    validate_transition,
    within_grace_period,
)
from assignments.models import RoomAssignment
from assignments.services import AssignmentService, GRACE_CANCEL_NOTE
from core.constants import AssignmentStatus as S, RoomStatus, UserRole, ApprovalStatus
from core.dto import AssignmentRequestDTO
from core.exceptions import CapacityExceededError, ConflictError, InvalidStateError, PermissionDeniedError
from rooms.models import Room
from users.models import User

MEDIA_ROOT = tempfile.mkdtemp()


def id_image(name: str = "id.png") -> SimpleUploadedFile:
    return SimpleUploadedFile(name, b"\x89PNG\r\n\x1a\n" + b"0" * 64, content_type="image/png")


def make_tenant(email: str = "tenant@example.com", **extra) -> User:
    return User.objects.create_user(
        email=email, password="secret123", name=email.split("@")[0].title(),
        approval_status=ApprovalStatus.APPROVED, is_email_verified=True, **extra
    )


def make_admin(email: str = "admin@example.com") -> User:
    return User.objects.create_user(
        email=email, password="secret123", name="Admin", role=UserRole.ADMIN,
        approval_status=ApprovalStatus.APPROVED, is_email_verified=True, is_staff=True,
    )


def make_room(number: str = "101", capacity: int = 2, **extra) -> Room:
    return Room.objects.create(number=number, floor="1", capacity=capacity, **extra)


def request_for(room: Room, **overrides) -> AssignmentRequestDTO:
    data = dict(
        room_id=room.id,
        start_date=date(2026, 1, 1),
        end_date=date(2026, 1, 31),
        id_image=id_image(),
    )
    data.update(overrides)
    return AssignmentRequestDTO(**data)


class TransitionTableTests(SimpleTestCase):
    def test_allowed_moves(self) -> None:
        for previous, new in [
            (S.PENDING, S.APPROVED), (S.PENDING, S.ACTIVE), (S.PENDING, S.REJECTED),
            (S.PENDING, S.CANCELLED), (S.APPROVED, S.ACTIVE), (S.APPROVED, S.COMPLETED),
            (S.ACTIVE, S.COMPLETED), (S.ACTIVE, S.CANCELLED),
        ]:
            validate_transition(previous, new)

    def test_same_status_is_allowed(self) -> None:
        validate_transition(S.APPROVED, S.APPROVED)
        validate_transition(S.COMPLETED, S.COMPLETED)

    def test_terminal_states_are_never_left(self) -> None:
        for terminal in S.TERMINAL:
            for new in (S.PENDING, S.APPROVED, S.ACTIVE):
                with self.assertRaises(InvalidStateError):
                    validate_transition(terminal, new)

    def test_active_cannot_go_back_to_approved(self) -> None:
        with self.assertRaises(InvalidStateError) as ctx:
            validate_transition(S.ACTIVE, S.APPROVED)
        self.assertEqual(ctx.exception.code, "INVALID_TRANSITION")

    def test_unknown_status(self) -> None:
        with self.assertRaises(InvalidStateError) as ctx:
            validate_transition(S.PENDING, "archived")
        self.assertEqual(ctx.exception.code, "UNKNOWN_STATUS")


class OccupancySynchronizerTests(SimpleTestCase):
    def test_approval_takes_a_slot(self) -> None:
        mutation = synchronize_occupancy(S.PENDING, S.APPROVED, 0, 2, RoomStatus.AVAILABLE, tenant_id=7)
        self.assertEqual(mutation.delta, 1)
        self.assertEqual(mutation.occupied, 1)
        self.assertEqual(mutation.status, RoomStatus.AVAILABLE)
        self.assertEqual(mutation.tenant_id, 7)

    def test_last_slot_marks_room_occupied(self) -> None:
        mutation = synchronize_occupancy(S.PENDING, S.ACTIVE, 1, 2, RoomStatus.AVAILABLE)
        self.assertEqual(mutation.occupied, 2)
        self.assertEqual(mutation.status, RoomStatus.OCCUPIED)

    def test_full_room_rejects_approval(self) -> None:
        with self.assertRaises(CapacityExceededError):
            synchronize_occupancy(S.PENDING, S.APPROVED, 2, 2, RoomStatus.OCCUPIED)

    def test_moves_that_leave_the_room_alone(self) -> None:
        self.assertIsNone(synchronize_occupancy(S.APPROVED, S.ACTIVE, 1, 2, RoomStatus.AVAILABLE))
        self.assertIsNone(synchronize_occupancy(S.PENDING, S.REJECTED, 1, 2, RoomStatus.AVAILABLE))
        self.assertIsNone(synchronize_occupancy(S.PENDING, S.CANCELLED, 1, 2, RoomStatus.AVAILABLE))
        self.assertIsNone(synchronize_occupancy(S.APPROVED, S.APPROVED, 1, 2, RoomStatus.AVAILABLE))

    def test_leaving_frees_a_slot(self) -> None:
        mutation = synchronize_occupancy(S.ACTIVE, S.COMPLETED, 2, 2, RoomStatus.OCCUPIED)
        self.assertEqual(mutation.delta, -1)
        self.assertEqual(mutation.occupied, 1)
        self.assertEqual(mutation.status, RoomStatus.AVAILABLE)

    def test_occupancy_never_drops_below_zero(self) -> None:
        mutation = synchronize_occupancy(S.APPROVED, S.CANCELLED, 0, 2, RoomStatus.AVAILABLE)
        self.assertEqual(mutation.occupied, 0)

    def test_maintenance_status_is_kept(self) -> None:
        mutation = synchronize_occupancy(S.APPROVED, S.REJECTED, 1, 1, RoomStatus.MAINTENANCE)
        self.assertEqual(mutation.status, RoomStatus.MAINTENANCE)


class PricingTests(SimpleTestCase):
    def test_daily_rate_from_monthly_rate(self) -> None:
        self.assertEqual(compute_total_price(date(2026, 1, 1), date(2026, 1, 11), 6000), Decimal("2000"))

    def test_rounds_half_up(self) -> None:
        # 5000 / 30 = 166.666...
        self.assertEqual(compute_total_price(date(2026, 1, 1), date(2026, 1, 2), 5000), Decimal("167"))

    def test_partial_days_round_up(self) -> None:
        start = datetime(2026, 1, 1, 8, 0)
        self.assertEqual(compute_total_price(start, start + timedelta(days=2, hours=1), 3000), Decimal("300"))

    def test_dates_in_either_order(self) -> None:
        self.assertEqual(compute_total_price(date(2026, 1, 11), date(2026, 1, 1), 6000), Decimal("2000"))


class GracePeriodTests(SimpleTestCase):
    def setUp(self) -> None:
        self.approved = datetime(2026, 3, 1, 9, 0, tzinfo=dt_timezone.utc)

    def test_just_inside(self) -> None:
        self.assertTrue(within_grace_period(self.approved, self.approved + timedelta(hours=23.99), 24))

    def test_boundary_is_inclusive(self) -> None:
        self.assertTrue(within_grace_period(self.approved, self.approved + timedelta(hours=24), 24))

    def test_just_outside(self) -> None:
        self.assertFalse(within_grace_period(self.approved, self.approved + timedelta(hours=24.01), 24))


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class AssignmentServiceTests(TestCase):
    """Lifecycle service against the database."""

    @classmethod
    def tearDownClass(cls) -> None:
        super().tearDownClass()
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)

    def setUp(self) -> None:
        self.service = AssignmentService()
        self.admin = make_admin()
        self.tenant = make_tenant()
        self.room = make_room(capacity=2, monthly_rate=Decimal("6000"))

    def _approved(self, tenant=None, room=None, now=None) -> RoomAssignment:
        assignment = self.service.create_assignment(tenant or self.tenant, request_for(room or self.room))
        return self.service.update_status(self.admin, assignment.id, S.APPROVED, now=now)

    def test_create_is_pending_and_leaves_room_alone(self) -> None:
        assignment = self.service.create_assignment(self.tenant, request_for(self.room))
        self.room.refresh_from_db()
        self.assertEqual(assignment.status, S.PENDING)
        self.assertEqual(self.room.occupied, 0)
        self.assertRegex(assignment.reference_number, r"^REF-\d{8}-[A-Z0-9]{6}$")

    def test_create_computes_missing_price(self) -> None:
        dto = request_for(self.room, start_date=date(2026, 1, 1), end_date=date(2026, 1, 11), total_price=None)
        assignment = self.service.create_assignment(self.tenant, dto)
        self.assertEqual(assignment.total_price, Decimal("2000"))

    def test_create_keeps_given_price(self) -> None:
        assignment = self.service.create_assignment(self.tenant, request_for(self.room, total_price=Decimal("4500")))
        self.assertEqual(assignment.total_price, Decimal("4500"))

    def test_second_open_booking_conflicts(self) -> None:
        self.service.create_assignment(self.tenant, request_for(self.room))
        other_room = make_room(number="102")
        with self.assertRaises(ConflictError) as ctx:
            self.service.create_assignment(self.tenant, request_for(other_room))
        self.assertEqual(ctx.exception.code, "OPEN_BOOKING_EXISTS")

    def test_new_booking_allowed_after_rejection(self) -> None:
        first = self.service.create_assignment(self.tenant, request_for(self.room))
        self.service.update_status(self.admin, first.id, S.REJECTED)
        second = self.service.create_assignment(self.tenant, request_for(self.room))
        self.assertEqual(second.status, S.PENDING)

    def test_missing_id_document_conflicts(self) -> None:
        with self.assertRaises(ConflictError) as ctx:
            self.service.create_assignment(self.tenant, request_for(self.room, id_image=None))
        self.assertEqual(ctx.exception.code, "ID_DOCUMENT_REQUIRED")

    def test_room_under_maintenance_cannot_be_booked(self) -> None:
        room = make_room(number="103", status=RoomStatus.MAINTENANCE)
        with self.assertRaises(ConflictError):
            self.service.create_assignment(self.tenant, request_for(room))

    def test_approval_takes_slot_and_stamps_time(self) -> None:
        assignment = self._approved()
        self.room.refresh_from_db()
        self.assertEqual(self.room.occupied, 1)
        self.assertIsNotNone(assignment.approval_time)
        self.assertTrue(self.room.current_occupants.filter(id=self.tenant.id).exists())

    def test_reapproval_does_not_double_count(self) -> None:
        assignment = self._approved()
        first_approval = assignment.approval_time
        again = self.service.update_status(self.admin, assignment.id, S.APPROVED)
        self.room.refresh_from_db()
        self.assertEqual(self.room.occupied, 1)
        self.assertEqual(again.approval_time, first_approval)

    def test_approval_when_full_changes_nothing(self) -> None:
        room = make_room(number="201", capacity=1)
        first = self.service.create_assignment(self.tenant, request_for(room))
        pending = self.service.create_assignment(make_tenant("late@example.com"), request_for(room))
        self.service.update_status(self.admin, first.id, S.APPROVED)

        with self.assertRaises(CapacityExceededError):
            self.service.update_status(self.admin, pending.id, S.APPROVED)

        room.refresh_from_db()
        pending.refresh_from_db()
        self.assertEqual(room.occupied, 1)
        self.assertEqual(room.status, RoomStatus.OCCUPIED)
        self.assertEqual(pending.status, S.PENDING)
        self.assertIsNone(pending.approval_time)

    def test_activation_stamps_check_in_without_new_slot(self) -> None:
        assignment = self._approved()
        active = self.service.update_status(self.admin, assignment.id, S.ACTIVE)
        self.room.refresh_from_db()
        self.assertEqual(self.room.occupied, 1)
        self.assertIsNotNone(active.check_in_time)

    def test_terminal_booking_only_accepts_notes(self) -> None:
        assignment = self.service.create_assignment(self.tenant, request_for(self.room))
        self.service.update_status(self.admin, assignment.id, S.REJECTED)
        with self.assertRaises(InvalidStateError):
            self.service.update_status(self.admin, assignment.id, S.APPROVED)
        updated = self.service.update_status(self.admin, assignment.id, S.REJECTED, notes="Incomplete ID")
        self.assertEqual(updated.notes, "Incomplete ID")

    def test_checkout_within_grace_period_cancels(self) -> None:
        approved_at = timezone.now() - timedelta(days=3)
        assignment = self._approved(now=approved_at)
        result, message = self.service.checkout(
            self.tenant, assignment.id, now=approved_at + timedelta(hours=23.99)
        )
        self.room.refresh_from_db()
        self.assertEqual(result.status, S.CANCELLED)
        self.assertIn(GRACE_CANCEL_NOTE, result.notes)
        self.assertIsNone(result.check_out_time)
        self.assertEqual(message, "Booking cancelled successfully")
        self.assertEqual(self.room.occupied, 0)

    def test_checkout_after_grace_period_completes(self) -> None:
        approved_at = timezone.now() - timedelta(days=3)
        assignment = self._approved(now=approved_at)
        leaving = approved_at + timedelta(hours=24.01)
        result, _ = self.service.checkout(self.tenant, assignment.id, now=leaving)
        self.room.refresh_from_db()
        self.assertEqual(result.status, S.COMPLETED)
        self.assertEqual(result.check_out_time, leaving)
        self.assertEqual(result.checked_out_by, self.tenant)
        self.assertEqual(self.room.occupied, 0)
        self.assertFalse(self.room.current_occupants.exists())

    def test_full_room_reopens_after_checkout(self) -> None:
        room = make_room(number="301", capacity=1)
        approved_at = timezone.now() - timedelta(days=5)
        assignment = self._approved(room=room, now=approved_at)
        room.refresh_from_db()
        self.assertEqual(room.status, RoomStatus.OCCUPIED)

        self.service.checkout(self.tenant, assignment.id, now=approved_at + timedelta(days=2))
        room.refresh_from_db()
        self.assertEqual(room.status, RoomStatus.AVAILABLE)

    def test_checkout_requires_owner(self) -> None:
        assignment = self._approved()
        with self.assertRaises(PermissionDeniedError):
            self.service.checkout(make_tenant("other@example.com"), assignment.id)

    def test_checkout_requires_slot(self) -> None:
        assignment = self.service.create_assignment(self.tenant, request_for(self.room))
        with self.assertRaises(InvalidStateError) as ctx:
            self.service.checkout(self.tenant, assignment.id)
        self.assertEqual(ctx.exception.code, "NOT_CHECKED_IN")

    def test_delete_refused_while_holding_slot(self) -> None:
        assignment = self._approved()
        with self.assertRaises(InvalidStateError):
            self.service.delete_assignment(assignment.id)
        self.assertTrue(RoomAssignment.objects.filter(id=assignment.id).exists())

    def test_delete_pending(self) -> None:
        assignment = self.service.create_assignment(self.tenant, request_for(self.room))
        self.service.delete_assignment(assignment.id)
        self.assertFalse(RoomAssignment.objects.filter(id=assignment.id).exists())

    def test_release_all_for_tenant(self) -> None:
        self._approved()
        released = self.service.release_all_for_tenant(self.tenant)
        self.room.refresh_from_db()
        self.assertEqual(released, 1)
        self.assertEqual(self.room.occupied, 0)

    def test_print_transactions_filters_by_range(self) -> None:
        approved_at = timezone.make_aware(datetime(2026, 2, 10, 9, 0))
        assignment = self._approved(now=approved_at)
        self.service.checkout(self.tenant, assignment.id, now=approved_at + timedelta(days=10))

        inside = self.service.print_transactions(date(2026, 2, 1), date(2026, 2, 28))
        self.assertEqual(inside["total_records"], 1)
        row = inside["data"][0]
        self.assertEqual(row["status"], "Check-out")
        self.assertEqual(row["duration"], "10 days")
        self.assertEqual(row["room_number"], "101")
        self.assertEqual(inside["total_room_price"], "6000.00")

        outside = self.service.print_transactions(date(2026, 5, 1), date(2026, 5, 31))
        self.assertEqual(outside["total_records"], 0)
        self.assertEqual(outside["total_room_price"], "0.00")

    def test_print_transactions_includes_stays_spanning_range(self) -> None:
        approved_at = timezone.make_aware(datetime(2026, 1, 5, 9, 0))
        self._approved(now=approved_at)
        result = self.service.print_transactions(date(2026, 3, 1), date(2026, 3, 31))
        self.assertEqual(result["total_records"], 1)
        self.assertEqual(result["data"][0]["duration"], "Ongoing")

    def test_print_transactions_rounds_partial_days_like_pricing(self) -> None:
        approved_at = timezone.make_aware(datetime(2026, 3, 1, 9, 0))
        checked_out_at = approved_at + timedelta(days=1, hours=12)
        assignment = self._approved(now=approved_at)
        self.service.checkout(self.tenant, assignment.id, now=checked_out_at)

        row = self.service.print_transactions(date(2026, 3, 1), date(2026, 3, 31))["data"][0]
        self.assertEqual(row["duration"], "2 days")
        self.assertEqual(stay_length_days(approved_at, checked_out_at), 2)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class AssignmentAPITests(APITestCase):
    """HTTP behaviour of /api/assignments/."""

    @classmethod
    def tearDownClass(cls) -> None:
        super().tearDownClass()
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)

    def setUp(self) -> None:
        super().setUp()
        self.admin = make_admin()
        self.tenant = make_tenant()
        self.room = make_room(capacity=1)

    def _book(self, user=None, room=None, with_image=True):
        self.client.force_authenticate(user=user or self.tenant)
        payload = {
            "room_id": (room or self.room).id,
            "start_date": "2026-01-01",
            "end_date": "2026-01-31",
        }
        if with_image:
            payload["idImage"] = id_image()
        return self.client.post(reverse("assignment-list"), payload, format="multipart")

    def test_tenant_books_room(self) -> None:
        response = self._book()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], S.PENDING)
        self.assertEqual(response.data["requested_by"]["id"], self.tenant.id)
        self.assertEqual(response.data["room"]["number"], "101")
        self.assertTrue(re.match(r"^REF-\d{8}-[A-Z0-9]{6}$", response.data["reference_number"]))

    def test_booking_without_id_document(self) -> None:
        response = self._book(with_image=False)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "ID_DOCUMENT_REQUIRED")

    def test_booking_unknown_room(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        response = self.client.post(reverse("assignment-list"), {
            "room_id": 9999, "start_date": "2026-01-01", "end_date": "2026-01-31", "idImage": id_image(),
        }, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "Room not found")

    def test_second_open_booking(self) -> None:
        self._book()
        other = make_room(number="102")
        response = self._book(room=other)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "OPEN_BOOKING_EXISTS")

    def test_tenant_cannot_change_status(self) -> None:
        booking = self._book().data
        response = self.client.patch(
            reverse("assignment-detail", args=[booking["id"]]), {"status": S.APPROVED}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_approval_and_capacity(self) -> None:
        first = self._book().data
        second = self._book(user=make_tenant("second@example.com")).data

        self.client.force_authenticate(user=self.admin)
        approved = self.client.patch(
            reverse("assignment-detail", args=[first["id"]]), {"status": S.APPROVED}, format="json"
        )
        self.assertEqual(approved.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(approved.data["approval_time"])

        full = self.client.patch(
            reverse("assignment-detail", args=[second["id"]]), {"status": S.APPROVED}, format="json"
        )
        self.assertEqual(full.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(full.data["code"], "CAPACITY_EXCEEDED")
        self.room.refresh_from_db()
        self.assertEqual(self.room.occupied, 1)

    def test_invalid_transition_is_bad_request(self) -> None:
        booking = self._book().data
        self.client.force_authenticate(user=self.admin)
        url = reverse("assignment-detail", args=[booking["id"]])
        self.client.patch(url, {"status": S.CANCELLED}, format="json")
        response = self.client.patch(url, {"status": S.ACTIVE}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_TRANSITION")

    def test_checkout_right_after_approval_cancels(self) -> None:
        booking = self._book().data
        self.client.force_authenticate(user=self.admin)
        self.client.patch(reverse("assignment-detail", args=[booking["id"]]), {"status": S.APPROVED}, format="json")

        self.client.force_authenticate(user=self.tenant)
        response = self.client.post(reverse("assignment-checkout", args=[booking["id"]]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["assignment"]["status"], S.CANCELLED)
        self.room.refresh_from_db()
        self.assertEqual(self.room.occupied, 0)

    def test_tenant_lists_only_own_bookings(self) -> None:
        self._book()
        self._book(user=make_tenant("second@example.com"), room=make_room(number="102"))

        self.client.force_authenticate(user=self.tenant)
        response = self.client.get(reverse("assignment-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)

        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse("assignment-list"))
        self.assertEqual(response.data["count"], 2)

    def test_tenant_cannot_read_other_booking(self) -> None:
        booking = self._book(user=make_tenant("second@example.com")).data
        self.client.force_authenticate(user=self.tenant)
        response = self.client.get(reverse("assignment-detail", args=[booking["id"]]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_pending_list_is_admin_only(self) -> None:
        self._book()
        response = self.client.get(reverse("assignment-pending"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse("assignment-pending"))
        self.assertEqual(len(response.data), 1)

    def test_print_transactions(self) -> None:
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(
            reverse("assignment-print-transactions"), {"startDate": "2026-01-01", "endDate": "2026-01-31"}
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["total_records"], 0)

    def test_admin_delete_rules(self) -> None:
        booking = self._book().data
        self.client.force_authenticate(user=self.admin)
        url = reverse("assignment-detail", args=[booking["id"]])
        self.client.patch(url, {"status": S.APPROVED}, format="json")

        refused = self.client.delete(url)
        self.assertEqual(refused.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(refused.data["code"], "BOOKING_HOLDS_SLOT")

        self.client.patch(url, {"status": S.REJECTED}, format="json")
        removed = self.client.delete(url)
        self.assertEqual(removed.status_code, status.HTTP_200_OK)
