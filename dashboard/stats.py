"""
Time-bucketed booking statistics for the admin dashboard.

Pure functions over booking-like objects exposing status, total_price,
start_date, end_date, check_in_time, approval_time, check_out_time,
updated_at and room.monthly_rate. Buckets are half-open [start, end)
intervals in the local timezone passed in.
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple

from assignments.lifecycle import compute_total_price
from core.constants import AssignmentStatus, DefaultLimits

S = AssignmentStatus


@dataclass(frozen=True)
class Bucket:
    label: str
    start: datetime
    end: datetime

    def contains(self, moment: Optional[datetime]) -> bool:
        return moment is not None and self.start <= moment < self.end


def _midnight(day: date, tz) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=tz)


def _next_month(year: int, month: int) -> Tuple[int, int]:
    return (year + 1, 1) if month == 12 else (year, month + 1)


def target_month(now: datetime, month_offset: int = 0, year_offset: int = 0) -> Tuple[int, int]:
    """Month shifted by month_offset (rolling over years), then by year_offset"""
    index = now.month - 1 + month_offset
    year = now.year + index // 12
    return year + year_offset, index % 12 + 1


def month_buckets(year: int, month: int, tz) -> List[Bucket]:
    """One bucket per calendar day"""
    days = calendar.monthrange(year, month)[1]
    buckets = []
    for day in range(1, days + 1):
        start = _midnight(date(year, month, day), tz)
        if day < days:
            end = _midnight(date(year, month, day + 1), tz)
        else:
            end = _midnight(date(*_next_month(year, month), 1), tz)
        buckets.append(Bucket(str(day), start, end))
    return buckets


def year_buckets(year: int, tz) -> List[Bucket]:
    """One bucket per calendar month"""
    buckets = []
    for month in range(1, 13):
        start = _midnight(date(year, month, 1), tz)
        end = _midnight(date(*_next_month(year, month), 1), tz)
        buckets.append(Bucket(calendar.month_abbr[month], start, end))
    return buckets


def _as_local(value, tz) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.astimezone(tz)
    return _midnight(value, tz)


def check_in_moment(booking, tz) -> Optional[datetime]:
    """Check-in time, else approval time, else the booked start date"""
    return _as_local(booking.check_in_time or booking.approval_time or booking.start_date, tz)


def booking_income(booking) -> Decimal:
    """Stored price, or the daily-rate estimate when none was stored"""
    if booking.total_price:
        return Decimal(booking.total_price)
    room = getattr(booking, 'room', None)
    rate = getattr(room, 'monthly_rate', None) or DefaultLimits.DEFAULT_MONTHLY_RATE
    return compute_total_price(booking.start_date, booking.end_date, rate)


def _whole(value) -> int:
    return int(Decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def income_series(bookings: Iterable, buckets: List[Bucket], label: str, tz) -> dict:
    billable = [(check_in_moment(b, tz), booking_income(b)) for b in bookings if b.status in S.BILLABLE]
    data = []
    for bucket in buckets:
        value = sum((income for moment, income in billable if bucket.contains(moment)), Decimal('0'))
        data.append({'label': bucket.label, 'value': _whole(value)})
    return {
        'label': label,
        'data': data,
        'total': sum(point['value'] for point in data),
    }


def check_in_out_series(bookings: Iterable, buckets: List[Bucket], label: str, tz) -> dict:
    bookings = list(bookings)
    check_ins = [check_in_moment(b, tz) for b in bookings if b.status in S.BILLABLE]
    check_outs = [_as_local(b.check_out_time, tz) for b in bookings if b.status == S.COMPLETED]
    cancellations = [_as_local(b.updated_at, tz) for b in bookings if b.status == S.CANCELLED]

    def count(moments):
        return [sum(1 for moment in moments if bucket.contains(moment)) for bucket in buckets]

    series = {
        'label': label,
        'labels': [bucket.label for bucket in buckets],
        'check_ins': count(check_ins),
        'check_outs': count(check_outs),
        'cancelled': count(cancellations),
    }
    series['total_check_ins'] = sum(series['check_ins'])
    series['total_check_outs'] = sum(series['check_outs'])
    series['total_cancelled'] = sum(series['cancelled'])
    return series


def income_between(bookings: Iterable, start: date, end: date) -> int:
    """Income of billable bookings whose booked stay overlaps [start, end]"""
    total = sum(
        (booking_income(b) for b in bookings
         if b.status in S.BILLABLE and b.start_date <= end and b.end_date >= start),
        Decimal('0')
    )
    return _whole(total)


def dashboard_stats(bookings: Iterable, now: datetime, tz, month_offset: int = 0, year_offset: int = 0) -> dict:
    bookings = list(bookings)
    local_now = now.astimezone(tz)
    today = local_now.date()

    year, month = target_month(local_now, month_offset, year_offset)
    month_label = f"{calendar.month_name[month]} {year}"
    days = month_buckets(year, month, tz)

    stats_year = local_now.year + year_offset
    months = year_buckets(stats_year, tz)

    return {
        'income': {
            'monthly': income_between(bookings, today.replace(day=1), today),
            'yearly': income_between(bookings, date(today.year, 1, 1), today),
            'monthly_data': income_series(bookings, days, month_label, tz),
            'yearly_data': income_series(bookings, months, str(stats_year), tz),
        },
        'check_in_out': {
            'monthly': check_in_out_series(bookings, days, month_label, tz),
            'yearly': check_in_out_series(bookings, months, str(stats_year), tz),
        },
    }
