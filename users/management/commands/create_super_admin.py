"""
Management command to create or promote the super admin account
"""
import os

from django.core.management.base import BaseCommand, CommandError

from core.constants import UserRole, ApprovalStatus
from users.repositories import UserRepository


class Command(BaseCommand):
    help = 'Create the super admin account, or promote an existing account to super admin'

    def add_arguments(self, parser):
        parser.add_argument('--email', default=os.environ.get('SUPER_ADMIN_EMAIL'))
        parser.add_argument('--password', default=os.environ.get('SUPER_ADMIN_PASSWORD'))
        parser.add_argument('--name', default=os.environ.get('SUPER_ADMIN_NAME', 'Super Admin'))

    def handle(self, *args, **options):
        email, password = options['email'], options['password']
        if not email:
            raise CommandError('Provide --email or set SUPER_ADMIN_EMAIL')

        users = UserRepository()
        user = users.get_by_email(email)
        if user:
            users.update(
                user,
                role=UserRole.ADMIN,
                is_super_admin=True,
                is_staff=True,
                approval_status=ApprovalStatus.APPROVED,
                is_email_verified=True,
                is_temporary=False,
            )
            self.stdout.write(self.style.SUCCESS(f'Promoted {user.email} to super admin'))
            return

        if not password:
            raise CommandError('Provide --password or set SUPER_ADMIN_PASSWORD')
        user = users.model.objects.create_superuser(email=email, password=password, name=options['name'])
        self.stdout.write(self.style.SUCCESS(f'Created super admin {user.email}'))
