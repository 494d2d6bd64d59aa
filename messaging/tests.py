"""Tests for tenant and admin messaging."""
from __future__ import annotations

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from core.constants import ApprovalStatus, UserRole
from core.exceptions import ValidationError
from messaging.models import Message
from messaging.services import MessageService
from users.models import User


def make_user(email: str, role: str = UserRole.TENANT) -> User:
    return User.objects.create_user(
        email=email, password="secret123", name=email.split("@")[0].title(), role=role,
        approval_status=ApprovalStatus.APPROVED, is_email_verified=True,
    )


class MessageServiceTests(TestCase):
    def setUp(self) -> None:
        self.admin = make_user("admin@example.com", role=UserRole.ADMIN)
        self.tenant = make_user("tenant@example.com")
        self.service = MessageService()

    def test_tenant_writes_to_admins(self) -> None:
        message = self.service.send_message(self.tenant, "  Hello  ", recipient_id=self.admin.id)
        self.assertIsNone(message.recipient)
        self.assertFalse(message.is_admin_message)
        self.assertEqual(message.content, "Hello")
        self.assertEqual(message.tenant_id, self.tenant.id)

    def test_admin_needs_recipient(self) -> None:
        with self.assertRaises(ValidationError) as caught:
            self.service.send_message(self.admin, "Hi")
        self.assertEqual(caught.exception.code, "RECIPIENT_REQUIRED")

        with self.assertRaises(ValidationError) as caught:
            self.service.send_message(self.admin, "Hi", recipient_id=999)
        self.assertEqual(caught.exception.code, "INVALID_RECIPIENT")

    def test_empty_message(self) -> None:
        with self.assertRaises(ValidationError) as caught:
            self.service.send_message(self.tenant, "   ")
        self.assertEqual(caught.exception.code, "EMPTY_MESSAGE")

    def test_conversation_holds_both_directions(self) -> None:
        other = make_user("other@example.com")
        self.service.send_message(self.tenant, "Question")
        self.service.send_message(self.admin, "Answer", recipient_id=self.tenant.id)
        self.service.send_message(other, "Unrelated")

        contents = [m.content for m in self.service.conversation_for(self.tenant)]
        self.assertEqual(contents, ["Question", "Answer"])
        contents = [m.content for m in self.service.conversation_for(self.admin, self.tenant.id)]
        self.assertEqual(contents, ["Question", "Answer"])

    def test_admin_conversation_needs_tenant(self) -> None:
        with self.assertRaises(ValidationError) as caught:
            self.service.conversation_for(self.admin)
        self.assertEqual(caught.exception.code, "USER_REQUIRED")

    def test_conversations_summary(self) -> None:
        other = make_user("other@example.com")
        self.service.send_message(self.tenant, "First")
        self.service.send_message(self.tenant, "Second")
        self.service.send_message(other, "Hi there")
        self.service.send_message(self.admin, "Reply", recipient_id=self.tenant.id)

        rows = self.service.conversations()
        self.assertEqual([row["user_id"] for row in rows], [self.tenant.id, other.id])
        self.assertEqual(rows[0]["last_message_content"], "Reply")
        self.assertEqual(rows[0]["unread_count"], 2)
        self.assertEqual(rows[1]["unread_count"], 1)

    def test_mark_read_per_side(self) -> None:
        self.service.send_message(self.tenant, "Question")
        self.service.send_message(self.admin, "Answer", recipient_id=self.tenant.id)

        self.assertEqual(self.service.mark_read(self.admin, self.tenant.id), 1)
        self.assertEqual(self.service.mark_read(self.tenant), 1)
        self.assertFalse(Message.objects.filter(is_read=False).exists())
        self.assertEqual(self.service.mark_read(self.tenant), 0)


class MessageAPITests(APITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = make_user("admin@example.com", role=UserRole.ADMIN)
        self.tenant = make_user("tenant@example.com")

    def test_tenant_chat(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        response = self.client.post(reverse("message-list"), {"content": "Is the wifi down?"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get(reverse("message-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_admin_reads_conversations(self) -> None:
        Message.objects.create(sender=self.tenant, content="Hello")
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(reverse("message-conversations"))
        self.assertEqual(response.data[0]["user_email"], "tenant@example.com")

        response = self.client.get(reverse("message-detail", args=[self.tenant.id]))
        self.assertEqual([row["content"] for row in response.data], ["Hello"])

        response = self.client.put(reverse("message-read"), {"user_id": self.tenant.id}, format="json")
        self.assertEqual(response.data, {"success": True, "updated": 1})

    def test_admin_list_without_user(self) -> None:
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse("message-list"))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "USER_REQUIRED")

    def test_tenant_cannot_browse_conversations(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        self.assertEqual(self.client.get(reverse("message-conversations")).status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get(reverse("message-detail", args=[self.tenant.id])).status_code,
                         status.HTTP_403_FORBIDDEN)
