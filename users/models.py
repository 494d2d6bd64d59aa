import secrets
import time

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils import timezone

from core.constants import UserRole, ApprovalStatus


def generate_user_code():
    """USR + last 8 digits of the millisecond clock + 4 random digits"""
    stamp = str(int(time.time() * 1000))[-8:]
    return f"USR{stamp}{secrets.randbelow(10000):04d}"


class UserManager(BaseUserManager):
    """Email is the login identifier"""
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("Email is required")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('role', UserRole.TENANT)
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('role', UserRole.ADMIN)
        extra_fields.setdefault('is_super_admin', True)
        extra_fields.setdefault('approval_status', ApprovalStatus.APPROVED)
        extra_fields.setdefault('is_email_verified', True)
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Dormitory user - tenant or admin"""
    username = None
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150)
    mobile_number = models.CharField(max_length=20, blank=True, default='')
    user_code = models.CharField(max_length=20, unique=True, default=generate_user_code, editable=False)

    role = models.CharField(max_length=10, choices=UserRole.CHOICES, default=UserRole.TENANT)
    is_super_admin = models.BooleanField(default=False)
    approval_status = models.CharField(max_length=10, choices=ApprovalStatus.CHOICES,
                                       default=ApprovalStatus.PENDING)
    is_blocked = models.BooleanField(default=False)

    # Registration is temporary until the emailed code is confirmed
    is_email_verified = models.BooleanField(default=False)
    is_temporary = models.BooleanField(default=False)
    verification_code = models.CharField(max_length=6, blank=True, default='')
    verification_code_expires = models.DateTimeField(null=True, blank=True)

    password_reset_code = models.CharField(max_length=6, blank=True, default='')
    password_reset_expires = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        ordering = ['-created_at']
        verbose_name = "User"
        verbose_name_plural = "Users"
        indexes = [
            models.Index(fields=['role', 'approval_status'], name='users_role_approval_idx'),
            models.Index(fields=['is_temporary', 'verification_code_expires'], name='users_temp_expiry_idx'),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}> ({self.get_role_display()})"

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.lower()
        super().save(*args, **kwargs)

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN

    @property
    def is_tenant(self):
        return self.role == UserRole.TENANT

    def verification_expired(self, now=None):
        now = now or timezone.now()
        return self.verification_code_expires is None or self.verification_code_expires < now

    def reset_code_expired(self, now=None):
        now = now or timezone.now()
        return self.password_reset_expires is None or self.password_reset_expires < now
