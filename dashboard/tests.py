"""Tests for the dashboard statistics."""
from __future__ import annotations

from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from types import SimpleNamespace
from zoneinfo import ZoneInfo

from django.test import SimpleTestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from core.constants import AssignmentStatus as S, UserRole, ApprovalStatus
from dashboard.stats import dashboard_stats, month_buckets, target_month, year_buckets
from users.models import User

MANILA = ZoneInfo("Asia/Manila")


def booking(status, total_price=0, start=date(2026, 10, 1), end=date(2026, 10, 31), check_in=None,
            approval=None, check_out=None, updated=None, rate=5000):
    return SimpleNamespace(
        status=status,
        total_price=Decimal(total_price),
        start_date=start,
        end_date=end,
        check_in_time=check_in,
        approval_time=approval,
        check_out_time=check_out,
        updated_at=updated or datetime(2026, 1, 1, tzinfo=MANILA),
        room=SimpleNamespace(monthly_rate=Decimal(rate)),
    )


def local(*args):
    return datetime(*args, tzinfo=MANILA)


class BucketTests(SimpleTestCase):
    def test_target_month_rolls_over_years(self) -> None:
        now = local(2026, 10, 16, 12)
        self.assertEqual(target_month(now), (2026, 10))
        self.assertEqual(target_month(now, month_offset=-10), (2025, 12))
        self.assertEqual(target_month(now, month_offset=3), (2027, 1))
        self.assertEqual(target_month(now, month_offset=-1, year_offset=-1), (2025, 9))

    def test_month_buckets_cover_every_day(self) -> None:
        buckets = month_buckets(2028, 2, MANILA)
        self.assertEqual(len(buckets), 29)
        self.assertEqual(buckets[0].label, "1")
        self.assertEqual(buckets[-1].end, local(2028, 3, 1))

    def test_year_buckets(self) -> None:
        buckets = year_buckets(2026, MANILA)
        self.assertEqual([b.label for b in buckets][:3], ["Jan", "Feb", "Mar"])
        self.assertEqual(buckets[11].end, local(2027, 1, 1))

    def test_buckets_are_half_open(self) -> None:
        first, second = month_buckets(2026, 10, MANILA)[:2]
        midnight = local(2026, 10, 2)
        self.assertFalse(first.contains(midnight))
        self.assertTrue(second.contains(midnight))


class DashboardStatsTests(SimpleTestCase):
    def setUp(self) -> None:
        self.now = local(2026, 10, 16, 12)
        self.bookings = [
            booking(S.COMPLETED, 3000, start=date(2026, 10, 3), end=date(2026, 10, 10),
                    check_in=local(2026, 10, 3, 10), check_out=local(2026, 10, 10, 9)),
            booking(S.CANCELLED, 1000, updated=local(2026, 10, 5, 15)),
            booking(S.PENDING, 9999, check_in=local(2026, 10, 6, 8)),
            # No stored price: 6000 / 30 * 10 days
            booking(S.APPROVED, 0, start=date(2026, 9, 1), end=date(2026, 9, 11),
                    approval=local(2026, 9, 1, 8), rate=6000),
        ]

    def _stats(self, **offsets):
        return dashboard_stats(self.bookings, now=self.now, tz=MANILA, **offsets)

    def test_monthly_income_series(self) -> None:
        series = self._stats()["income"]["monthly_data"]
        self.assertEqual(series["label"], "October 2026")
        self.assertEqual(len(series["data"]), 31)
        self.assertEqual(series["data"][2], {"label": "3", "value": 3000})
        self.assertEqual(series["total"], 3000)

    def test_yearly_income_series_uses_estimate(self) -> None:
        series = self._stats()["income"]["yearly_data"]
        values = {point["label"]: point["value"] for point in series["data"]}
        self.assertEqual(series["label"], "2026")
        self.assertEqual(values["Sep"], 2000)
        self.assertEqual(values["Oct"], 3000)
        self.assertEqual(series["total"], 5000)

    def test_income_totals(self) -> None:
        income = self._stats()["income"]
        self.assertEqual(income["monthly"], 3000)
        self.assertEqual(income["yearly"], 5000)

    def test_check_in_out_counts(self) -> None:
        monthly = self._stats()["check_in_out"]["monthly"]
        self.assertEqual(monthly["check_ins"][2], 1)
        self.assertEqual(monthly["check_outs"][9], 1)
        self.assertEqual(monthly["cancelled"][4], 1)
        self.assertEqual(monthly["total_check_ins"], 1)
        self.assertEqual(monthly["total_check_outs"], 1)
        self.assertEqual(monthly["total_cancelled"], 1)

        yearly = self._stats()["check_in_out"]["yearly"]
        self.assertEqual(yearly["total_check_ins"], 2)
        self.assertEqual(yearly["labels"][0], "Jan")

    def test_month_offset(self) -> None:
        stats = self._stats(month_offset=-1)
        self.assertEqual(stats["income"]["monthly_data"]["label"], "September 2026")
        self.assertEqual(stats["income"]["monthly_data"]["total"], 2000)
        self.assertEqual(stats["check_in_out"]["monthly"]["total_check_ins"], 1)

    def test_year_offset(self) -> None:
        stats = self._stats(year_offset=-1)
        self.assertEqual(stats["income"]["yearly_data"]["label"], "2025")
        self.assertEqual(stats["income"]["yearly_data"]["total"], 0)

    def test_buckets_follow_local_time(self) -> None:
        # 17:00 UTC on the 3rd is 01:00 on the 4th in Manila
        self.bookings = [booking(S.ACTIVE, 500, check_in=datetime(2026, 10, 3, 17, tzinfo=dt_timezone.utc))]
        data = self._stats()["income"]["monthly_data"]["data"]
        self.assertEqual(data[2]["value"], 0)
        self.assertEqual(data[3]["value"], 500)

    def test_start_date_is_last_fallback(self) -> None:
        self.bookings = [booking(S.APPROVED, 700, start=date(2026, 10, 12))]
        data = self._stats()["income"]["monthly_data"]["data"]
        self.assertEqual(data[11]["value"], 700)


class DashboardAPITests(APITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = User.objects.create_user(
            email="admin@example.com", password="secret123", name="Admin", role=UserRole.ADMIN,
            approval_status=ApprovalStatus.APPROVED,
        )
        self.tenant = User.objects.create_user(email="tenant@example.com", password="secret123", name="Tenant")

    def test_stats_shape(self) -> None:
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse("dashboard-stats"), {"monthOffset": -1, "yearOffset": 0})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(set(response.data), {"income", "check_in_out"})
        self.assertEqual(set(response.data["income"]), {"monthly", "yearly", "monthly_data", "yearly_data"})
        self.assertEqual(set(response.data["check_in_out"]), {"monthly", "yearly"})

    def test_stats_rejects_bad_offset(self) -> None:
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse("dashboard-stats"), {"monthOffset": "soon"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_tenant_forbidden(self) -> None:
        self.client.force_authenticate(user=self.tenant)
        response = self.client.get(reverse("dashboard-stats"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_summary_counts(self) -> None:
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse("dashboard-summary"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_rooms"], 0)
        self.assertEqual(response.data["occupancy_rate"], 0.0)
        self.assertEqual(response.data["total_tenants"], 1)
