"""Tests for the users app."""
from __future__ import annotations

from datetime import timedelta
from io import StringIO

from django.core import mail
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from assignments.models import RoomAssignment
from core.constants import ApprovalStatus, AssignmentStatus, RoomStatus, UserRole
from rooms.models import Room
from users.models import User
from users.services import UserService


def make_admin(email: str = "admin@example.com", super_admin: bool = False) -> User:
    return User.objects.create_user(
        email=email, password="secret123", name="Admin", role=UserRole.ADMIN,
        is_super_admin=super_admin, approval_status=ApprovalStatus.APPROVED, is_email_verified=True,
    )


def make_tenant(email: str = "tenant@example.com", **extra) -> User:
    extra.setdefault("is_email_verified", True)
    return User.objects.create_user(email=email, password="secret123", name="Tina Tenant", **extra)


class RegistrationFlowTests(APITestCase):
    """Verify registration, verification and login endpoints."""

    def setUp(self) -> None:
        super().setUp()
        cache.clear()

    def _request_code(self, **overrides):
        data = {"name": "Tina Tenant", "email": "Tina@Example.com", "password": "secret123"}
        data.update(overrides)
        return self.client.post(reverse("user-request-verification"), data, format="json")

    def test_request_verification_creates_temporary_user(self) -> None:
        response = self._request_code()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["requires_verification"])

        user = User.objects.get(id=response.data["user_id"])
        self.assertEqual(user.email, "tina@example.com")
        self.assertTrue(user.is_temporary)
        self.assertFalse(user.is_email_verified)
        self.assertRegex(user.verification_code, r"^\d{6}$")
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(user.verification_code, mail.outbox[0].body)

    def test_duplicate_email_conflicts(self) -> None:
        make_tenant("tina@example.com")
        response = self._request_code()
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "EMAIL_TAKEN")

    def test_short_password_rejected(self) -> None:
        response = self._request_code(password="123")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_verify_email_returns_token(self) -> None:
        user_id = self._request_code().data["user_id"]
        code = User.objects.get(id=user_id).verification_code

        response = self.client.post(
            reverse("user-verify-email"), {"user_id": user_id, "code": code}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("token", response.data)

        user = User.objects.get(id=user_id)
        self.assertTrue(user.is_email_verified)
        self.assertFalse(user.is_temporary)
        self.assertEqual(user.verification_code, "")
        self.assertEqual(len(mail.outbox), 2)

    def test_wrong_code_keeps_registration(self) -> None:
        user_id = self._request_code().data["user_id"]
        response = self.client.post(
            reverse("user-verify-email"), {"user_id": user_id, "code": "000000"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_CODE")
        self.assertTrue(User.objects.filter(id=user_id).exists())

    def test_expired_code_discards_registration(self) -> None:
        user_id = self._request_code().data["user_id"]
        user = User.objects.get(id=user_id)
        user.verification_code_expires = timezone.now() - timedelta(seconds=1)
        user.save()

        response = self.client.post(
            reverse("user-verify-email"), {"user_id": user_id, "code": user.verification_code}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "CODE_EXPIRED")
        self.assertFalse(User.objects.filter(id=user_id).exists())

    def test_resend_replaces_code(self) -> None:
        user_id = self._request_code().data["user_id"]
        response = self.client.post(reverse("user-resend-verification"), {"user_id": user_id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 2)

    def test_register_directly(self) -> None:
        response = self.client.post(reverse("user-register"), {
            "name": "Dan Direct", "email": "dan@example.com", "password": "secret123",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["approval_status"], ApprovalStatus.PENDING)
        self.assertIn("token", response.data)

    def test_login_and_profile(self) -> None:
        make_tenant()
        response = self.client.post(
            reverse("user-login"), {"email": "TENANT@example.com", "password": "secret123"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['token']}")
        profile = self.client.get(reverse("user-profile"))
        self.assertEqual(profile.status_code, status.HTTP_200_OK)
        self.assertEqual(profile.data["email"], "tenant@example.com")

    def test_login_wrong_password(self) -> None:
        make_tenant()
        response = self.client.post(
            reverse("user-login"), {"email": "tenant@example.com", "password": "nope-nope"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["code"], "AUTHENTICATION_FAILED")

    def test_blocked_user_cannot_login(self) -> None:
        make_tenant(is_blocked=True)
        response = self.client.post(
            reverse("user-login"), {"email": "tenant@example.com", "password": "secret123"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_verification_requests_are_throttled(self) -> None:
        for _ in range(5):
            self._request_code()
        response = self._request_code()
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)

    def test_throttle_is_per_email(self) -> None:
        for _ in range(5):
            self._request_code()
        response = self._request_code(email="someone.else@example.com")
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class PasswordResetTests(APITestCase):
    def setUp(self) -> None:
        super().setUp()
        cache.clear()
        self.user = make_tenant()

    def _request_reset(self) -> str:
        response = self.client.post(
            reverse("user-request-password-reset"), {"email": self.user.email}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        return self.user.password_reset_code

    def test_full_reset(self) -> None:
        code = self._request_reset()
        checked = self.client.post(
            reverse("user-verify-password-reset-code"), {"user_id": self.user.id, "code": code}, format="json"
        )
        self.assertTrue(checked.data["verified"])

        response = self.client.post(reverse("user-verify-password-reset"), {
            "user_id": self.user.id, "code": code, "new_password": "brand-new-pass",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("brand-new-pass"))
        self.assertEqual(self.user.password_reset_code, "")

    def test_wrong_code_clears_code(self) -> None:
        self._request_reset()
        response = self.client.post(
            reverse("user-verify-password-reset-code"), {"user_id": self.user.id, "code": "000000"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.user.refresh_from_db()
        self.assertEqual(self.user.password_reset_code, "")

    def test_unverified_account_cannot_reset(self) -> None:
        make_tenant("new@example.com", is_email_verified=False, is_temporary=True)
        response = self.client.post(
            reverse("user-request-password-reset"), {"email": "new@example.com"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "EMAIL_NOT_VERIFIED")

    def test_unknown_email(self) -> None:
        response = self.client.post(
            reverse("user-request-password-reset"), {"email": "ghost@example.com"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class TenantAdministrationTests(APITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = make_admin()
        self.tenant = make_tenant()
        self.client.force_authenticate(user=self.admin)

    def test_pending_approvals(self) -> None:
        response = self.client.get(reverse("user-pending-approvals"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in response.data], [self.tenant.id])

    def test_set_approval_status(self) -> None:
        response = self.client.patch(
            reverse("user-set-status", args=[self.tenant.id]), {"status": ApprovalStatus.APPROVED}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.tenant.refresh_from_db()
        self.assertEqual(self.tenant.approval_status, ApprovalStatus.APPROVED)

    def test_admin_status_cannot_change(self) -> None:
        other = make_admin("second@example.com")
        response = self.client.patch(
            reverse("user-set-status", args=[other.id]), {"status": ApprovalStatus.REJECTED}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_block_and_unblock(self) -> None:
        self.client.post(reverse("user-block", args=[self.tenant.id]))
        self.tenant.refresh_from_db()
        self.assertTrue(self.tenant.is_blocked)

        self.client.force_authenticate(user=self.tenant)
        self.assertEqual(self.client.get(reverse("user-profile")).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        self.client.post(reverse("user-unblock", args=[self.tenant.id]))
        self.tenant.refresh_from_db()
        self.assertFalse(self.tenant.is_blocked)

    def test_tenant_cannot_list_users(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        response = self.client.get(reverse("user-list"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_tenant_releases_room(self) -> None:
        room = Room.objects.create(number="101", floor="1", capacity=1, occupied=1, status=RoomStatus.OCCUPIED)
        room.current_occupants.add(self.tenant)
        RoomAssignment.objects.create(
            reference_number="REF-01012026-ABC123", requested_by=self.tenant, room=room,
            start_date="2026-01-01", end_date="2026-01-31", id_image="ids/ID-1.png",
            status=AssignmentStatus.APPROVED,
        )

        response = self.client.delete(reverse("user-detail", args=[self.tenant.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(id=self.tenant.id).exists())
        self.assertFalse(RoomAssignment.objects.exists())
        room.refresh_from_db()
        self.assertEqual(room.occupied, 0)
        self.assertEqual(room.status, RoomStatus.AVAILABLE)


class AdminAccountTests(APITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.super_admin = make_admin("root@example.com", super_admin=True)

    @override_settings(ADMIN_CREATION_CODE="letmein")
    def test_bootstrap_only_without_admins(self) -> None:
        payload = {"name": "First", "email": "first@example.com", "password": "secret123", "admin_code": "letmein"}
        response = self.client.post(reverse("user-create-admin"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        User.objects.all().delete()
        response = self.client.post(reverse("user-create-admin"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["is_super_admin"])

    @override_settings(ADMIN_CREATION_CODE="letmein")
    def test_bootstrap_wrong_code(self) -> None:
        User.objects.all().delete()
        response = self.client.post(reverse("user-create-admin"), {
            "name": "First", "email": "first@example.com", "password": "secret123", "admin_code": "guess",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_super_admin_manages_admins(self) -> None:
        self.client.force_authenticate(user=self.super_admin)
        created = self.client.post(reverse("admin-account-list"), {
            "name": "Helper", "email": "helper@example.com", "password": "secret123",
        }, format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        self.assertFalse(created.data["is_super_admin"])

        updated = self.client.patch(
            reverse("admin-account-detail", args=[created.data["id"]]), {"name": "Helper Two"}, format="json"
        )
        self.assertEqual(updated.data["admin"]["name"], "Helper Two")

        listed = self.client.get(reverse("admin-account-list"))
        self.assertEqual(len(listed.data), 2)

        deleted = self.client.delete(reverse("admin-account-detail", args=[created.data["id"]]))
        self.assertEqual(deleted.status_code, status.HTTP_200_OK)

    def test_super_admin_is_undeletable(self) -> None:
        self.client.force_authenticate(user=self.super_admin)
        response = self.client.delete(reverse("admin-account-detail", args=[self.super_admin.id]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "SUPER_ADMIN")

    def test_regular_admin_cannot_create_admins(self) -> None:
        self.client.force_authenticate(user=make_admin())
        response = self.client.post(reverse("admin-account-list"), {
            "name": "Helper", "email": "helper@example.com", "password": "secret123",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class RegistrationCleanupTests(TestCase):
    def test_only_expired_temporary_users_removed(self) -> None:
        past = timezone.now() - timedelta(minutes=10)
        future = timezone.now() + timedelta(minutes=10)
        make_tenant("old@example.com", is_email_verified=False, is_temporary=True, verification_code_expires=past)
        make_tenant("fresh@example.com", is_email_verified=False, is_temporary=True,
                    verification_code_expires=future)
        make_tenant("kept@example.com")

        self.assertEqual(UserService().cleanup_expired_registrations(), 1)
        self.assertEqual(
            set(User.objects.values_list("email", flat=True)), {"fresh@example.com", "kept@example.com"}
        )
        # Running again finds nothing
        self.assertEqual(UserService().cleanup_expired_registrations(), 0)

    def test_management_command(self) -> None:
        make_tenant("old@example.com", is_email_verified=False, is_temporary=True,
                    verification_code_expires=timezone.now() - timedelta(minutes=1))
        out = StringIO()
        call_command("cleanup_registrations", stdout=out)
        self.assertIn("Removed 1", out.getvalue())
