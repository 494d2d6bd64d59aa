"""
Management command to recount room occupancy from bookings
"""
from django.core.management.base import BaseCommand

from rooms.services import RoomService


class Command(BaseCommand):
    help = 'Rewrite room occupancy, occupants and status from approved/active bookings'

    def handle(self, *args, **options):
        changed = RoomService().reconcile_occupancy()
        self.stdout.write(self.style.SUCCESS(f'Reconciled occupancy, {changed} rooms changed'))
