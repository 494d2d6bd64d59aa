"""
Account services: registration with email verification, login,
password reset and admin account management.
"""
from datetime import timedelta

from django.conf import settings
from django.core.validators import validate_email
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from rest_framework_simplejwt.tokens import RefreshToken

from common import emails
from core.constants import UserRole, ApprovalStatus, DefaultLimits
from core.exceptions import (
    AuthenticationFailedError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.services import BaseService
from core.validators import PasswordValidator
from users.repositories import UserRepository


def issue_token(user):
    """Access token carrying the user id"""
    return str(RefreshToken.for_user(user).access_token)


def _require(**fields):
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise ValidationError(
            message="Please provide all required fields",
            code="MISSING_FIELDS",
            details={"missing": missing}
        )


def _check_email(email):
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError(message="Please provide a valid email address", code="INVALID_EMAIL")


class UserService(BaseService):
    def __init__(self, repository: UserRepository = None):
        super().__init__()
        self.users = repository or UserRepository()

    @property
    def code_ttl(self):
        minutes = getattr(settings, 'DORM_VERIFICATION_CODE_TTL_MINUTES', DefaultLimits.VERIFICATION_CODE_TTL_MINUTES)
        return timedelta(minutes=minutes)

    # Registration

    @transaction.atomic
    def request_verification(self, name, email, password, mobile_number=''):
        """Create a temporary tenant and email it a verification code"""
        _require(name=name, email=email, password=password)
        _check_email(email)
        PasswordValidator.validate_password(password)
        if self.users.email_taken(email):
            raise ConflictError(message="User already exists with this email", code="EMAIL_TAKEN")

        code = emails.generate_code()
        user = self.users.model.objects.create_user(
            email=email,
            password=password,
            name=name,
            mobile_number=mobile_number or '',
            role=UserRole.TENANT,
            approval_status=ApprovalStatus.PENDING,
            is_temporary=True,
            verification_code=code,
            verification_code_expires=timezone.now() + self.code_ttl,
        )
        emails.send_verification_email(user.email, user.name, code)
        self.log_info("Verification requested", user_id=user.id, email=user.email)
        return user

    # Not atomic: an expired registration stays deleted when the error is raised
    def verify_email(self, user_id, code):
        _require(user_id=user_id, verification_code=code)
        user = self.users.get_or_raise(user_id)
        if user.is_email_verified:
            raise InvalidStateError(message="Email already verified", code="ALREADY_VERIFIED")

        if user.verification_expired():
            self.log_info("Verification code expired, discarding registration", user_id=user.id)
            self.users.delete(user)
            raise ValidationError(
                message="Verification code has expired. Please request a new one.",
                code="CODE_EXPIRED"
            )

        if user.verification_code != str(code):
            raise ValidationError(
                message="Invalid verification code. Please try again or request a new code.",
                code="INVALID_CODE"
            )

        self.users.update(
            user,
            is_email_verified=True,
            is_temporary=False,
            verification_code='',
            verification_code_expires=None,
        )
        emails.send_account_created_email(user.email, user.name)
        self.log_info("Email verified", user_id=user.id)
        return user

    def resend_verification(self, user_id):
        _require(user_id=user_id)
        user = self.users.get_or_raise(user_id)
        if user.is_email_verified:
            raise InvalidStateError(message="Email already verified", code="ALREADY_VERIFIED")

        code = emails.generate_code()
        self.users.update(user, verification_code=code,
                          verification_code_expires=timezone.now() + self.code_ttl)
        emails.send_verification_email(user.email, user.name, code)
        return user

    def register(self, name, email, password, mobile_number=''):
        """Direct registration without email verification, pending admin approval"""
        _require(name=name, email=email, password=password)
        _check_email(email)
        PasswordValidator.validate_password(password)
        if self.users.email_taken(email):
            raise ConflictError(message="User already exists with this email", code="EMAIL_TAKEN")
        user = self.users.model.objects.create_user(
            email=email, password=password, name=name, mobile_number=mobile_number or '',
        )
        self.log_info("User registered", user_id=user.id)
        return user

    def authenticate(self, email, password):
        _require(email=email, password=password)
        user = self.users.get_by_email(email)
        if user is None or not user.check_password(password):
            raise AuthenticationFailedError()
        if user.is_blocked:
            raise PermissionDeniedError(message="User has been blocked by the admin", code="USER_BLOCKED")
        self.log_info("User logged in", user_id=user.id)
        return user

    # Password reset

    def request_password_reset(self, email):
        _require(email=email)
        user = self.users.get_by_email(email)
        if user is None:
            raise NotFoundError(message="Account not found with this email. Please check and try again.")
        if user.is_temporary or not user.is_email_verified:
            raise InvalidStateError(
                message="Please verify your email first before resetting password",
                code="EMAIL_NOT_VERIFIED"
            )
        return self._issue_reset_code(user)

    def resend_password_reset(self, user_id):
        _require(user_id=user_id)
        return self._issue_reset_code(self.users.get_or_raise(user_id))

    def _issue_reset_code(self, user):
        code = emails.generate_code()
        self.users.update(user, password_reset_code=code,
                          password_reset_expires=timezone.now() + self.code_ttl)
        emails.send_password_reset_email(user.email, user.name, code)
        self.log_info("Password reset code issued", user_id=user.id)
        return user

    def check_reset_code(self, user_id, code):
        """Validate a reset code. A wrong or expired code is cleared"""
        _require(user_id=user_id, reset_code=code)
        user = self.users.get_or_raise(user_id)

        if not user.password_reset_code or user.password_reset_code != str(code):
            self._clear_reset_code(user)
            raise ValidationError(message="Invalid reset code", code="INVALID_CODE")
        if user.reset_code_expired():
            self._clear_reset_code(user)
            raise ValidationError(message="Reset code has expired. Please request a new one.",
                                  code="CODE_EXPIRED")
        return user

    # Not atomic: a failed check keeps the cleared code
    def reset_password(self, user_id, code, new_password):
        _require(user_id=user_id, reset_code=code, new_password=new_password)
        PasswordValidator.validate_password(new_password)
        user = self.check_reset_code(user_id, code)
        user.set_password(new_password)
        self._clear_reset_code(user)
        self.log_info("Password reset", user_id=user.id)
        return user

    def _clear_reset_code(self, user):
        self.users.update(user, password_reset_code='', password_reset_expires=None)

    # Tenant administration

    def set_approval_status(self, user_id, approval_status):
        if approval_status not in dict(ApprovalStatus.CHOICES):
            raise ValidationError(message="Invalid status value", code="INVALID_STATUS")
        user = self.users.get_or_raise(user_id)
        if user.is_admin:
            raise InvalidStateError(message="Cannot change status of admin users", code="ADMIN_TARGET")
        self.users.update(user, approval_status=approval_status)
        self.log_info("Approval status changed", user_id=user.id, status=approval_status)
        return user

    def set_blocked(self, user_id, blocked: bool):
        user = self.users.get_or_raise(user_id)
        if user.is_admin:
            raise InvalidStateError(message="Cannot block admin users", code="ADMIN_TARGET")
        self.users.update(user, is_blocked=blocked)
        self.log_info("User blocked" if blocked else "User unblocked", user_id=user.id)
        return user

    @transaction.atomic
    def delete_tenant(self, user_id):
        """Delete a tenant, releasing any room slot its bookings hold"""
        from assignments.services import AssignmentService

        user = self.users.get_or_raise(user_id)
        if user.is_admin:
            raise InvalidStateError(message="Cannot delete admin users here", code="ADMIN_TARGET")

        released = AssignmentService().release_all_for_tenant(user)
        self.users.delete(user)
        self.log_info("Tenant deleted", user_id=user_id, released_slots=released)

    # Admin accounts

    @transaction.atomic
    def bootstrap_admin(self, name, email, password, admin_code):
        """Create the first admin, who becomes the super admin"""
        _require(name=name, email=email, password=password, admin_code=admin_code)
        expected = settings.ADMIN_CREATION_CODE
        if not expected or admin_code != expected:
            raise AuthenticationFailedError(message="Invalid admin creation code", code="INVALID_ADMIN_CODE")
        if self.users.admin_exists():
            raise ConflictError(message="An admin user already exists", code="ADMIN_EXISTS")
        return self._create_admin(name, email, password, super_admin=True)

    def create_admin(self, actor, name, email, password):
        self._require_super_admin(actor)
        _require(name=name, email=email, password=password)
        return self._create_admin(name, email, password, super_admin=False)

    def _create_admin(self, name, email, password, super_admin):
        _check_email(email)
        PasswordValidator.validate_password(password)
        if self.users.email_taken(email):
            raise ConflictError(message="An account with this email already exists", code="EMAIL_TAKEN")
        admin = self.users.model.objects.create_user(
            email=email,
            password=password,
            name=name,
            role=UserRole.ADMIN,
            is_super_admin=super_admin,
            approval_status=ApprovalStatus.APPROVED,
            is_email_verified=True,
            is_staff=True,
        )
        self.log_info("Admin created", admin_id=admin.id, super_admin=super_admin)
        return admin

    def update_admin(self, actor, admin_id, name=None, email=None, password=None):
        self._require_super_admin(actor)
        admin = self.users.get_or_raise(admin_id, role=UserRole.ADMIN)
        changes = {}
        if name:
            changes['name'] = name
        if email:
            _check_email(email)
            if self.users.email_taken(email, exclude_id=admin.id):
                raise ConflictError(message="Email is already in use by another account", code="EMAIL_TAKEN")
            changes['email'] = email
        if password:
            PasswordValidator.validate_password(password)
            admin.set_password(password)
        self.users.update(admin, **changes)
        self.log_info("Admin updated", admin_id=admin.id, fields=sorted(changes))
        return admin

    def delete_admin(self, actor, admin_id):
        self._require_super_admin(actor)
        admin = self.users.get_or_raise(admin_id, role=UserRole.ADMIN)
        if admin.is_super_admin:
            raise InvalidStateError(message="Super admin account cannot be deleted", code="SUPER_ADMIN")
        if admin.id == actor.id:
            raise InvalidStateError(message="You cannot delete your own admin account", code="SELF_DELETE")
        self.users.delete(admin)
        self.log_info("Admin deleted", admin_id=admin_id, actor_id=actor.id)

    @staticmethod
    def _require_super_admin(actor):
        if not getattr(actor, 'is_super_admin', False):
            raise PermissionDeniedError(message="Only super admin can manage admin accounts")

    # Housekeeping

    def cleanup_expired_registrations(self, now=None) -> int:
        """Delete temporary registrations whose code expired. Returns the number removed"""
        _, per_model = self.users.expired_registrations(now or timezone.now()).delete()
        return per_model.get(self.users.model._meta.label, 0)
