"""Tests for shared infrastructure: settings, health checks and error rendering."""
from __future__ import annotations

import shutil
import tempfile
from datetime import timedelta

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from common.exceptions import _first_message
from common.scheduler import cleanup_registrations_job
from common.models import DEFAULT_PAYMENT_INSTRUCTIONS, SystemSettings
from core.constants import ApprovalStatus, UserRole
from users.models import User

MEDIA_ROOT = tempfile.mkdtemp()


class FirstMessageTests(SimpleTestCase):
    def test_field_errors_name_the_field(self) -> None:
        self.assertEqual(_first_message({"email": ["This field is required."]}), "email: This field is required.")

    def test_detail_is_unwrapped(self) -> None:
        self.assertEqual(_first_message({"detail": "Not found."}), "Not found.")
        self.assertEqual(_first_message({"non_field_errors": ["Bad pair"]}), "Bad pair")
        self.assertEqual(_first_message([]), "")


class SystemSettingsModelTests(TestCase):
    def test_single_row(self) -> None:
        first = SystemSettings.load()
        SystemSettings(gcash_name="Dorm Office").save()
        self.assertEqual(SystemSettings.objects.count(), 1)
        self.assertEqual(SystemSettings.load().gcash_name, "Dorm Office")
        first.delete()
        self.assertEqual(SystemSettings.objects.count(), 1)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class SystemSettingsAPITests(APITestCase):
    @classmethod
    def tearDownClass(cls) -> None:
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self) -> None:
        super().setUp()
        self.admin = User.objects.create_user(
            email="admin@example.com", password="secret123", name="Admin", role=UserRole.ADMIN,
            approval_status=ApprovalStatus.APPROVED,
        )
        self.tenant = User.objects.create_user(email="tenant@example.com", password="secret123", name="Tenant")

    def test_anyone_can_read(self) -> None:
        response = self.client.get(reverse("system-settings"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["payment_instructions"], DEFAULT_PAYMENT_INSTRUCTIONS)
        self.assertIsNone(response.data["payment_qr_code"])

    def test_admin_uploads_qr_code(self) -> None:
        self.client.force_authenticate(user=self.admin)
        qr = SimpleUploadedFile("qr.png", b"\x89PNG\r\n\x1a\n0000", content_type="image/png")
        response = self.client.put(reverse("system-settings"), {
            "gcash_name": "Dorm Office", "gcash_number": "09171234567", "qrCode": qr,
        }, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["gcash_number"], "09171234567")
        self.assertIn("/payment/QR-", response.data["payment_qr_code"])

    def test_qr_code_must_be_image(self) -> None:
        self.client.force_authenticate(user=self.admin)
        bogus = SimpleUploadedFile("qr.pdf", b"%PDF-1.4", content_type="application/pdf")
        response = self.client.patch(reverse("system-settings"), {"payment_qr_code": bogus}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_FILE_TYPE")

    def test_tenant_cannot_edit(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        response = self.client.patch(reverse("system-settings"), {"gcash_name": "Me"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "PERMISSION_DENIED")


class HealthCheckTests(TestCase):
    def test_liveness(self) -> None:
        response = self.client.get(reverse("health_check"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_readiness(self) -> None:
        response = self.client.get(reverse("readiness_check"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["checks"], {"database": True, "cache": True})

    def test_deep_check_counts_rows(self) -> None:
        User.objects.create_user(email="tenant@example.com", password="secret123", name="Tenant")
        response = self.client.get(reverse("deep_health_check"))
        self.assertEqual(response.json()["checks"]["models"]["details"]["users"], 1)

    def test_request_id_is_echoed(self) -> None:
        response = self.client.get(reverse("health_check"), HTTP_X_REQUEST_ID="abc123")
        self.assertEqual(response["X-Request-ID"], "abc123")


class CrossOriginTests(TestCase):
    def test_preflight_from_frontend_origin(self) -> None:
        response = self.client.options(
            reverse("room-list"), HTTP_ORIGIN="http://localhost:5173",
            HTTP_ACCESS_CONTROL_REQUEST_METHOD="POST",
            HTTP_ACCESS_CONTROL_REQUEST_HEADERS="authorization, content-type, x-request-id",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Access-Control-Allow-Origin"], "http://localhost:5173")
        self.assertEqual(response["Access-Control-Allow-Credentials"], "true")
        self.assertIn("x-request-id", response["Access-Control-Allow-Headers"])

    def test_unknown_origin_gets_no_grant(self) -> None:
        response = self.client.options(
            reverse("room-list"), HTTP_ORIGIN="http://evil.example.com",
            HTTP_ACCESS_CONTROL_REQUEST_METHOD="GET",
        )
        self.assertNotIn("Access-Control-Allow-Origin", response)

    def test_request_id_is_readable_by_frontend(self) -> None:
        response = self.client.get(reverse("health_check"), HTTP_ORIGIN="http://localhost:5173")
        self.assertEqual(response["Access-Control-Allow-Origin"], "http://localhost:5173")
        self.assertIn("X-Request-ID", response["Access-Control-Expose-Headers"])


class SchedulerJobTests(TestCase):
    def test_cleanup_job_removes_expired_registrations(self) -> None:
        User.objects.create_user(
            email="old@example.com", password="secret123", name="Old", is_temporary=True,
            verification_code_expires=timezone.now() - timedelta(minutes=1),
        )
        cleanup_registrations_job()
        self.assertFalse(User.objects.filter(email="old@example.com").exists())
