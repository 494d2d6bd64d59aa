from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from assignments.models import RoomAssignment
from common.uploads import unique_upload_path
from core.constants import PaymentMethod, PaymentStatus


def payment_proof_upload_to(instance, filename):
    return unique_upload_path('payments', 'PROOF', filename)


class Payment(models.Model):
    """Payment submitted against a booking, verified by an admin"""
    assignment = models.ForeignKey(RoomAssignment, on_delete=models.CASCADE, related_name='payments')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    method = models.CharField(max_length=10, choices=PaymentMethod.CHOICES)
    # GCash transaction reference, empty for cash
    reference_number = models.CharField(max_length=50, blank=True, default='')
    proof_image = models.FileField(upload_to=payment_proof_upload_to, null=True, blank=True)

    status = models.CharField(max_length=10, choices=PaymentStatus.CHOICES, default=PaymentStatus.PENDING)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    remarks = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Payment"
        verbose_name_plural = "Payments"
        indexes = [
            models.Index(fields=['user', 'status'], name='payment_user_status_idx'),
            models.Index(fields=['assignment', 'status'], name='payment_assign_status_idx'),
        ]

    def __str__(self):
        return f"{self.get_method_display()} {self.amount} - {self.assignment.reference_number}"
