"""
Management command to delete expired, unverified registrations.
The background scheduler runs the same cleanup every two minutes.
"""
from django.core.management.base import BaseCommand

from users.services import UserService


class Command(BaseCommand):
    help = 'Delete temporary registrations whose verification code has expired'

    def handle(self, *args, **options):
        deleted = UserService().cleanup_expired_registrations()
        self.stdout.write(self.style.SUCCESS(f'Removed {deleted} expired registrations'))
