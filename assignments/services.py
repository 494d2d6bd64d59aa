"""
Room assignment lifecycle.

Every status change runs in one transaction with the booking and its
room locked, reads the persisted previous status and hands the room
change to the occupancy synchronizer.
"""
import secrets
import string
from datetime import datetime, time
from typing import Optional, Tuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from assignments.lifecycle import (
    compute_total_price,
    stay_length_days,
    synchronize_occupancy,
    validate_transition,
    within_grace_period,
)
from assignments.models import RoomAssignment
from assignments.repositories import AssignmentRepository
from common.uploads import delete_stored_file
from core.constants import AssignmentStatus, RoomStatus, DefaultLimits
from core.dto import AssignmentRequestDTO, TransactionRowDTO
from core.exceptions import (
    ConcurrentModificationError,
    ConflictError,
    InvalidStateError,
    PermissionDeniedError,
)
from core.services import BaseService
from core.validators import AssignmentValidator, UploadValidator
from rooms.repositories import RoomRepository

S = AssignmentStatus

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
GRACE_CANCEL_NOTE = '[Cancelled by user within 24h grace period]'

STATUS_LABELS = {
    S.COMPLETED: 'Check-out',
    S.ACTIVE: 'Check-in',
    S.APPROVED: 'Check-in',
}


class AssignmentService(BaseService):
    def __init__(self, repository: AssignmentRepository = None, rooms: RoomRepository = None):
        super().__init__()
        self.assignments = repository or AssignmentRepository()
        self.rooms = rooms or RoomRepository()

    # Creation

    def generate_reference(self, on_date=None) -> str:
        """REF-DDMMYYYY-XXXXXX, retried until unused"""
        on_date = on_date or timezone.localdate()
        prefix = f"REF-{on_date:%d%m%Y}-"
        for _ in range(DefaultLimits.REFERENCE_RETRIES):
            reference = prefix + ''.join(secrets.choice(REFERENCE_ALPHABET) for _ in range(6))
            if not self.assignments.reference_taken(reference):
                return reference
        raise ConcurrentModificationError(
            message="Could not allocate a booking reference, please retry",
            code="REFERENCE_EXHAUSTED"
        )

    @transaction.atomic
    def create_assignment(self, user, data: AssignmentRequestDTO) -> RoomAssignment:
        AssignmentValidator.validate_dates(data.start_date, data.end_date)

        room = self.rooms.get_or_raise(data.room_id)
        if room.status != RoomStatus.AVAILABLE:
            raise ConflictError(message="Room is not available for booking", code="ROOM_UNAVAILABLE",
                                details={"room_id": room.id, "status": room.status})

        # Lock the tenant row so two requests cannot both pass the open booking check
        get_user_model().objects.select_for_update().filter(id=user.id).first()
        if self.assignments.open_for_tenant(user, lock=True):
            raise ConflictError(
                message="You already have a pending or active room booking",
                code="OPEN_BOOKING_EXISTS"
            )

        if not data.id_image:
            raise ConflictError(message="An ID document image is required", code="ID_DOCUMENT_REQUIRED")
        UploadValidator.validate_image(data.id_image, 'id_image')

        total_price = data.total_price
        if not total_price:
            total_price = compute_total_price(data.start_date, data.end_date, room.monthly_rate)

        assignment = self.assignments.create(
            reference_number=self.generate_reference(),
            requested_by=user,
            room=room,
            start_date=data.start_date,
            end_date=data.end_date,
            id_image=data.id_image,
            total_price=total_price,
            notes=data.notes or '',
            status=S.PENDING,
        )
        self.log_info("Booking created", assignment_id=assignment.id, reference=assignment.reference_number,
                      room_id=room.id, tenant_id=user.id, total_price=str(total_price))
        return assignment

    # Status changes

    def _apply_status(self, assignment: RoomAssignment, new_status: str, actor=None, now=None) -> RoomAssignment:
        """Move a locked booking to new_status and sync its room. Caller holds the transaction"""
        previous = assignment.status
        validate_transition(previous, new_status)
        if previous == new_status:
            return assignment

        now = now or timezone.now()
        room = self.rooms.lock(assignment.room_id)
        mutation = synchronize_occupancy(
            previous, new_status, room.occupied, room.capacity, room.status, assignment.requested_by_id
        )
        if mutation:
            self.rooms.apply_mutation(room, mutation)

        assignment.status = new_status
        if new_status == S.APPROVED and assignment.approval_time is None:
            assignment.approval_time = now
        if new_status == S.ACTIVE and assignment.check_in_time is None:
            assignment.check_in_time = now
        if new_status == S.COMPLETED:
            assignment.check_out_time = now
            assignment.checked_out_by = actor

        self.log_info("Booking status changed", assignment_id=assignment.id, previous=previous,
                      new=new_status, room_id=room.id, occupied=room.occupied, room_status=room.status)
        return assignment

    @transaction.atomic
    def update_status(self, actor, assignment_id, new_status: str, notes: Optional[str] = None,
                      now: Optional[datetime] = None) -> RoomAssignment:
        """Admin status change. Notes alone may be edited in any status"""
        assignment = self.assignments.lock(assignment_id)
        self._apply_status(assignment, new_status, actor=actor, now=now)
        if notes is not None:
            assignment.notes = notes
        assignment.save()
        return self.assignments.get_queryset().get(id=assignment.id)

    @transaction.atomic
    def checkout(self, user, assignment_id, now: Optional[datetime] = None) -> Tuple[RoomAssignment, str]:
        """
        Tenant leaves a room. Within the grace period after approval the
        booking is cancelled, afterwards it is completed. Both free the slot.
        """
        assignment = self.assignments.lock(assignment_id)
        if assignment.requested_by_id != user.id:
            raise PermissionDeniedError(message="Not authorized to check out this booking")
        if assignment.status not in S.OCCUPYING:
            raise InvalidStateError(
                message="Only approved or active bookings can be checked out",
                code="NOT_CHECKED_IN",
                details={"status": assignment.status}
            )

        now = now or timezone.now()
        reference = assignment.approval_time or assignment.created_at
        grace_hours = getattr(settings, 'DORM_GRACE_PERIOD_HOURS', DefaultLimits.CHECKOUT_GRACE_HOURS)

        if within_grace_period(reference, now, grace_hours):
            self._apply_status(assignment, S.CANCELLED, actor=user, now=now)
            assignment.notes = f"{assignment.notes} {GRACE_CANCEL_NOTE}".strip()
            message = 'Booking cancelled successfully'
        else:
            self._apply_status(assignment, S.COMPLETED, actor=user, now=now)
            message = 'Successfully checked out from room'

        assignment.save()
        return self.assignments.get_queryset().get(id=assignment.id), message

    @transaction.atomic
    def delete_assignment(self, assignment_id):
        assignment = self.assignments.lock(assignment_id)
        if assignment.holds_slot:
            raise InvalidStateError(
                message="Cannot delete a booking that holds a room slot. Check it out first.",
                code="BOOKING_HOLDS_SLOT",
                details={"status": assignment.status}
            )
        document = assignment.id_image.name
        self.assignments.delete(assignment)
        transaction.on_commit(lambda: delete_stored_file(document))
        self.log_info("Booking deleted", assignment_id=assignment_id)

    def release_all_for_tenant(self, user) -> int:
        """Free every slot a tenant holds. Runs inside the caller's transaction"""
        released = 0
        for assignment in self.assignments.holding_slots_for_tenant(user):
            self._apply_status(assignment, S.CANCELLED, actor=None)
            assignment.save()
            released += 1
        return released

    # Queries

    def list_for(self, user):
        if user.is_admin:
            return self.assignments.get_queryset()
        return self.assignments.for_tenant(user)

    def print_transactions(self, start_date=None, end_date=None, now=None) -> dict:
        """Rows for the printable check-in/check-out history"""
        start = end = None
        if start_date and end_date:
            tz = timezone.get_current_timezone()
            start = timezone.make_aware(datetime.combine(start_date, time.min), tz)
            end = timezone.make_aware(datetime.combine(end_date, time.max), tz)

        rows = [self._transaction_row(a) for a in self.assignments.transactions(start, end)]
        total = sum((row.room_price for row in rows), start=0)
        return {
            'data': [row.to_dict() for row in rows],
            'total_room_price': f"{total:.2f}",
            'total_records': len(rows),
            'print_date': now or timezone.now(),
            'date_range': {'start_date': start_date, 'end_date': end_date} if start else None,
        }

    @staticmethod
    def _transaction_row(assignment: RoomAssignment) -> TransactionRowDTO:
        tenant, room = assignment.requested_by, assignment.room
        check_in = assignment.check_in_reference
        check_out = assignment.check_out_time
        if check_in and check_out:
            duration = f"{stay_length_days(check_in, check_out)} days"
        else:
            duration = 'Ongoing'
        return TransactionRowDTO(
            user_id=tenant.user_code,
            student_name=tenant.name,
            mobile_number=tenant.mobile_number or 'N/A',
            room_number=room.number,
            room_type=room.room_type,
            room_price=room.monthly_rate,
            status=STATUS_LABELS.get(assignment.status, assignment.get_status_display()),
            approval_time=assignment.approval_time,
            check_in_time=check_in,
            check_out_time=check_out,
            duration=duration,
            checked_out_by=assignment.checked_out_by.name if assignment.checked_out_by else '',
        )
