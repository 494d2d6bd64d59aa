"""
Outgoing email for account verification and password reset.
Uses Django's mail backend configured in settings (console backend in development).
"""
import logging
import secrets

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def generate_code():
    """Six digit numeric code"""
    return f"{secrets.randbelow(900000) + 100000}"


def _send(subject, body, recipient):
    try:
        send_mail(
            subject,
            body,
            settings.DEFAULT_FROM_EMAIL,
            [recipient],
            fail_silently=False,
        )
        logger.info(f"Sent '{subject}' email to {recipient}")
        return True
    except Exception as e:
        logger.error(f"Failed to send '{subject}' email to {recipient}: {e}", exc_info=True)
        return False


def send_verification_email(email, name, code):
    ttl = settings.DORM_VERIFICATION_CODE_TTL_MINUTES
    body = (
        f"Hello {name},\n\n"
        f"Your verification code is: {code}\n\n"
        f"This code expires in {ttl} minutes. If you did not request it, ignore this email."
    )
    return _send('Verify your email address', body, email)


def send_account_created_email(email, name):
    body = (
        f"Hello {name},\n\n"
        "Your dormitory account has been created. "
        "An administrator will review your registration shortly."
    )
    return _send('Your account has been created', body, email)


def send_password_reset_email(email, name, code):
    ttl = settings.DORM_VERIFICATION_CODE_TTL_MINUTES
    body = (
        f"Hello {name},\n\n"
        f"Your password reset code is: {code}\n\n"
        f"This code expires in {ttl} minutes."
    )
    return _send('Password reset code', body, email)
