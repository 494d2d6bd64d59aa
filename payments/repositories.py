from django.db.models import QuerySet

from core.constants import PaymentStatus
from core.repositories import BaseRepository
from payments.models import Payment


class PaymentRepository(BaseRepository[Payment]):
    resource_name = 'Payment'

    def __init__(self):
        super().__init__(Payment)

    def get_queryset(self) -> QuerySet[Payment]:
        return self.model.objects.select_related('user', 'assignment', 'assignment__room', 'verified_by')

    def for_user(self, user) -> QuerySet[Payment]:
        return self.get_queryset().filter(user=user)

    def pending(self) -> QuerySet[Payment]:
        return self.get_queryset().filter(status=PaymentStatus.PENDING)
