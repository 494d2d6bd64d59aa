"""Tests for booking payments."""
from __future__ import annotations

import shutil
import tempfile
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from assignments.models import RoomAssignment
from core.constants import ApprovalStatus, AssignmentStatus, PaymentMethod, PaymentStatus, UserRole
from core.exceptions import InvalidStateError, PermissionDeniedError, ValidationError
from payments.models import Payment
from payments.services import PaymentService
from rooms.models import Room
from users.models import User

MEDIA_ROOT = tempfile.mkdtemp()


def make_user(email: str, role: str = UserRole.TENANT) -> User:
    return User.objects.create_user(
        email=email, password="secret123", name=email.split("@")[0].title(), role=role,
        approval_status=ApprovalStatus.APPROVED, is_email_verified=True,
    )


def make_booking(tenant: User, room: Room, booking_status: str = AssignmentStatus.PENDING,
                 reference: str = "REF-01012026-PAY001") -> RoomAssignment:
    return RoomAssignment.objects.create(
        reference_number=reference, requested_by=tenant, room=room, start_date="2026-01-01",
        end_date="2026-01-31", id_image="ids/ID-test.png", status=booking_status, total_price=Decimal("5000"),
    )


class PaymentServiceTests(TestCase):
    def setUp(self) -> None:
        self.admin = make_user("admin@example.com", role=UserRole.ADMIN)
        self.tenant = make_user("tenant@example.com")
        self.room = Room.objects.create(number="101", floor="1", capacity=2)
        self.booking = make_booking(self.tenant, self.room)
        self.service = PaymentService()

    def _submit(self, **overrides) -> Payment:
        data = dict(amount=Decimal("5000"), method=PaymentMethod.CASH)
        data.update(overrides)
        return self.service.submit_payment(self.tenant, self.booking.id, **data)

    def test_submit_creates_pending_payment(self) -> None:
        payment = self._submit()
        self.assertEqual(payment.status, PaymentStatus.PENDING)
        self.assertEqual(payment.user, self.tenant)
        self.assertEqual(payment.reference_number, "")

    def test_gcash_needs_reference(self) -> None:
        with self.assertRaises(ValidationError) as caught:
            self._submit(method=PaymentMethod.GCASH)
        self.assertEqual(caught.exception.code, "REFERENCE_REQUIRED")

        payment = self._submit(method=PaymentMethod.GCASH, reference_number="GC-123")
        self.assertEqual(payment.reference_number, "GC-123")

    def test_only_owner_pays(self) -> None:
        stranger = make_user("stranger@example.com")
        with self.assertRaises(PermissionDeniedError):
            self.service.submit_payment(stranger, self.booking.id, Decimal("1"), PaymentMethod.CASH)

    def test_closed_booking_refuses_payment(self) -> None:
        self.booking.status = AssignmentStatus.CANCELLED
        self.booking.save()
        with self.assertRaises(InvalidStateError) as caught:
            self._submit()
        self.assertEqual(caught.exception.code, "BOOKING_CLOSED")

    def test_verifying_approves_pending_booking(self) -> None:
        payment = self._submit()
        payment = self.service.verify_payment(self.admin, payment.id, PaymentStatus.VERIFIED, remarks="ok")

        self.assertEqual(payment.status, PaymentStatus.VERIFIED)
        self.assertEqual(payment.verified_by, self.admin)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, AssignmentStatus.APPROVED)
        self.room.refresh_from_db()
        self.assertEqual(self.room.occupied, 1)

    def test_rejecting_leaves_booking_alone(self) -> None:
        payment = self._submit()
        self.service.verify_payment(self.admin, payment.id, PaymentStatus.REJECTED)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, AssignmentStatus.PENDING)

    def test_verifying_active_booking_keeps_it_active(self) -> None:
        self.booking.status = AssignmentStatus.ACTIVE
        self.booking.save()
        payment = self._submit()
        self.service.verify_payment(self.admin, payment.id, PaymentStatus.VERIFIED)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, AssignmentStatus.ACTIVE)

    def test_decision_is_final(self) -> None:
        payment = self._submit()
        self.service.verify_payment(self.admin, payment.id, PaymentStatus.REJECTED)
        with self.assertRaises(InvalidStateError) as caught:
            self.service.verify_payment(self.admin, payment.id, PaymentStatus.VERIFIED)
        self.assertEqual(caught.exception.code, "PAYMENT_DECIDED")

    def test_unknown_decision(self) -> None:
        payment = self._submit()
        with self.assertRaises(ValidationError):
            self.service.verify_payment(self.admin, payment.id, PaymentStatus.PENDING)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class PaymentAPITests(APITestCase):
    @classmethod
    def tearDownClass(cls) -> None:
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self) -> None:
        super().setUp()
        self.admin = make_user("admin@example.com", role=UserRole.ADMIN)
        self.tenant = make_user("tenant@example.com")
        self.room = Room.objects.create(number="101", floor="1", capacity=2)
        self.booking = make_booking(self.tenant, self.room)

    def test_submit_with_proof(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        proof = SimpleUploadedFile("proof.png", b"\x89PNG\r\n\x1a\n0000", content_type="image/png")
        response = self.client.post(reverse("payment-list"), {
            "assignment_id": self.booking.id,
            "amount": "5000.00",
            "method": PaymentMethod.GCASH,
            "reference_number": "GC-42",
            "proof_image": proof,
        }, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        payment = response.data["payment"]
        self.assertEqual(payment["assignment_reference"], "REF-01012026-PAY001")
        self.assertEqual(payment["room_number"], "101")
        self.assertTrue(payment["proof_image"].endswith(".png"))

    def test_proof_must_be_image(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        proof = SimpleUploadedFile("proof.txt", b"hello", content_type="text/plain")
        response = self.client.post(reverse("payment-list"), {
            "assignment_id": self.booking.id, "amount": "10", "method": PaymentMethod.CASH, "proof_image": proof,
        }, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_FILE_TYPE")

    def test_listing_is_scoped(self) -> None:
        other = make_user("other@example.com")
        other_booking = make_booking(other, self.room, reference="REF-01012026-PAY002")
        Payment.objects.create(assignment=self.booking, user=self.tenant, amount=1, method=PaymentMethod.CASH)
        theirs = Payment.objects.create(assignment=other_booking, user=other, amount=1, method=PaymentMethod.CASH)

        self.client.force_authenticate(user=self.tenant)
        self.assertEqual(self.client.get(reverse("payment-list")).data["count"], 1)
        response = self.client.get(reverse("payment-detail", args=[theirs.id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.get(reverse("payment-list")).data["count"], 2)

    def test_admin_verifies(self) -> None:
        payment = Payment.objects.create(assignment=self.booking, user=self.tenant, amount=1,
                                         method=PaymentMethod.CASH)
        self.client.force_authenticate(user=self.tenant)
        response = self.client.patch(reverse("payment-verify", args=[payment.id]),
                                     {"status": PaymentStatus.VERIFIED}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(reverse("payment-verify", args=[payment.id]),
                                     {"status": PaymentStatus.VERIFIED, "remarks": "Received"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Payment verified")
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, AssignmentStatus.APPROVED)
