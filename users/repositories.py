from typing import Optional

from django.db.models import QuerySet

from core.constants import UserRole
from core.repositories import BaseRepository
from users.models import User


class UserRepository(BaseRepository[User]):
    resource_name = 'User'

    def __init__(self):
        super().__init__(User)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.model.objects.filter(email=(email or '').strip().lower()).first()

    def email_taken(self, email: str, exclude_id: int = None) -> bool:
        queryset = self.model.objects.filter(email=(email or '').strip().lower())
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    def tenants(self) -> QuerySet[User]:
        return self.model.objects.filter(role=UserRole.TENANT, is_temporary=False)

    def admins(self) -> QuerySet[User]:
        return self.model.objects.filter(role=UserRole.ADMIN).order_by('-is_super_admin', 'created_at')

    def admin_exists(self) -> bool:
        return self.model.objects.filter(role=UserRole.ADMIN).exists()

    def expired_registrations(self, now) -> QuerySet[User]:
        return self.model.objects.filter(
            is_temporary=True,
            is_email_verified=False,
            verification_code_expires__lt=now,
        )
