"""
Booking status rules and the room occupancy synchronizer.

Everything here is pure: it takes plain values, never touches the
database and is shared by the assignment service, the room service
and the dashboard.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
import math
from typing import Optional

from core.constants import AssignmentStatus, RoomStatus, DefaultLimits
from core.exceptions import CapacityExceededError, InvalidStateError

S = AssignmentStatus

# Allowed moves. Re-saving the current status is always a no-op.
TRANSITIONS = {
    S.PENDING: frozenset({S.APPROVED, S.REJECTED, S.ACTIVE, S.CANCELLED}),
    S.APPROVED: frozenset({S.ACTIVE, S.COMPLETED, S.REJECTED, S.CANCELLED}),
    S.ACTIVE: frozenset({S.COMPLETED, S.REJECTED, S.CANCELLED}),
    S.COMPLETED: frozenset(),
    S.REJECTED: frozenset(),
    S.CANCELLED: frozenset(),
}


def can_transition(previous: str, new: str) -> bool:
    if previous == new:
        return True
    return new in TRANSITIONS.get(previous, frozenset())


def validate_transition(previous: str, new: str):
    if new not in TRANSITIONS:
        raise InvalidStateError(
            message=f"Unknown status '{new}'",
            code="UNKNOWN_STATUS",
            details={"status": new}
        )
    if not can_transition(previous, new):
        raise InvalidStateError(
            message=f"Cannot change a {previous} booking to {new}",
            code="INVALID_TRANSITION",
            details={"from": previous, "to": new}
        )


def derive_room_status(occupied: int, capacity: int, current: str) -> str:
    """Full rooms are occupied, others available. Maintenance is left alone"""
    if current == RoomStatus.MAINTENANCE:
        return current
    return RoomStatus.OCCUPIED if occupied >= capacity else RoomStatus.AVAILABLE


@dataclass(frozen=True)
class RoomMutation:
    """Change to apply to a room after a booking status change"""
    delta: int
    occupied: int
    status: str
    tenant_id: Optional[int] = None

    @property
    def adds_occupant(self):
        return self.delta > 0

    @property
    def removes_occupant(self):
        return self.delta < 0


def synchronize_occupancy(previous: str, new: str, occupied: int, capacity: int,
                          room_status: str, tenant_id: int = None) -> Optional[RoomMutation]:
    """
    Work out how a room changes when a booking moves from previous to new.

    Entering approved/active from pending takes a slot, leaving
    approved/active for a terminal status frees one. Every other
    move leaves the room untouched and returns None.
    """
    if previous == new:
        return None

    if previous == S.PENDING and new in S.OCCUPYING:
        if occupied >= capacity:
            raise CapacityExceededError(
                message="Room is already at full capacity",
                details={"occupied": occupied, "capacity": capacity}
            )
        occupied += 1
        return RoomMutation(1, occupied, derive_room_status(occupied, capacity, room_status), tenant_id)

    if previous in S.OCCUPYING and new in S.TERMINAL:
        occupied = max(0, occupied - 1)
        return RoomMutation(-1, occupied, derive_room_status(occupied, capacity, room_status), tenant_id)

    return None


# Pricing and durations

def stay_length_days(start, end) -> int:
    """Whole days between two dates or datetimes, partial days rounded up"""
    delta = abs(end - start)
    return math.ceil(delta.total_seconds() / 86400)


def compute_total_price(start, end, monthly_rate) -> Decimal:
    """monthly_rate / 30 per day, rounded half up to a whole currency unit"""
    days = stay_length_days(start, end)
    rate = Decimal(str(monthly_rate))
    total = rate * days / DefaultLimits.DAYS_PER_MONTH
    return total.quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def within_grace_period(reference: datetime, now: datetime, hours: int = DefaultLimits.CHECKOUT_GRACE_HOURS) -> bool:
    """True while at most `hours` have passed since reference"""
    return abs(now - reference).total_seconds() / 3600 <= hours
