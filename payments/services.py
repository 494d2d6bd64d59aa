"""
Booking payments. Verification approves the booking through the
assignment lifecycle so the room occupancy follows.
"""
from decimal import Decimal
from typing import Optional

from django.db import transaction

from assignments.repositories import AssignmentRepository
from assignments.services import AssignmentService
from core.constants import AssignmentStatus, PaymentMethod, PaymentStatus
from core.exceptions import InvalidStateError, PermissionDeniedError, ValidationError
from core.services import BaseService
from core.validators import UploadValidator
from payments.models import Payment
from payments.repositories import PaymentRepository


class PaymentService(BaseService):
    def __init__(self, repository: PaymentRepository = None):
        super().__init__()
        self.payments = repository or PaymentRepository()
        self.assignments = AssignmentRepository()

    @transaction.atomic
    def submit_payment(self, user, assignment_id, amount: Decimal, method: str,
                       reference_number: str = '', proof_image=None) -> Payment:
        assignment = self.assignments.get_or_raise(assignment_id)
        if assignment.requested_by_id != user.id and not user.is_admin:
            raise PermissionDeniedError(message="Not authorized to pay for this booking")
        if assignment.status in AssignmentStatus.TERMINAL:
            raise InvalidStateError(
                message="Cannot submit a payment for a closed booking",
                code="BOOKING_CLOSED",
                details={"status": assignment.status}
            )
        if method == PaymentMethod.GCASH and not reference_number:
            raise ValidationError(
                message="GCash payments need a reference number",
                code="REFERENCE_REQUIRED",
                details={"field": "reference_number"}
            )
        if proof_image:
            UploadValidator.validate_image(proof_image, 'proof_image')

        payment = self.payments.create(
            assignment=assignment,
            user=user,
            amount=amount,
            method=method,
            reference_number=reference_number if method == PaymentMethod.GCASH else '',
            proof_image=proof_image,
        )
        self.log_info("Payment submitted", payment_id=payment.id, assignment_id=assignment.id,
                      method=method, amount=str(amount))
        return payment

    @transaction.atomic
    def verify_payment(self, admin, payment_id, new_status: str, remarks: Optional[str] = None) -> Payment:
        """
        Record the admin's decision. A verified payment approves its booking
        while the booking is still pending; a rejection leaves it as is.
        """
        if new_status not in (PaymentStatus.VERIFIED, PaymentStatus.REJECTED):
            raise ValidationError(message="Status must be verified or rejected", code="INVALID_STATUS")

        payment = self.payments.lock(payment_id)
        if payment.status != PaymentStatus.PENDING:
            raise InvalidStateError(
                message=f"Payment is already {payment.status}",
                code="PAYMENT_DECIDED",
                details={"status": payment.status}
            )

        payment.status = new_status
        payment.verified_by = admin
        if remarks is not None:
            payment.remarks = remarks
        payment.save()

        if new_status == PaymentStatus.VERIFIED:
            assignment = self.assignments.get_or_raise(payment.assignment_id)
            if assignment.status == AssignmentStatus.PENDING:
                AssignmentService().update_status(admin, assignment.id, AssignmentStatus.APPROVED)

        self.log_info("Payment reviewed", payment_id=payment.id, status=new_status, admin_id=admin.id)
        return self.payments.get_queryset().get(id=payment.id)

    def list_for(self, user):
        if user.is_admin:
            return self.payments.get_queryset()
        return self.payments.for_user(user)
