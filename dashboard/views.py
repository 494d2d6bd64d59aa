"""
Admin Dashboard API

- stats:   income and check-in/check-out/cancellation series for a
           month (monthOffset) and a year (yearOffset)
- summary: current room, booking and tenant counts
"""

from django.db.models import Count, Q, Sum
from django.utils import timezone
from rest_framework import viewsets, serializers
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from api.permissions import IsAdmin
from assignments.repositories import AssignmentRepository
from core.constants import AssignmentStatus, RoomStatus
from rooms.repositories import RoomRepository
from users.repositories import UserRepository
from .stats import dashboard_stats


class OffsetSerializer(serializers.Serializer):
    monthOffset = serializers.IntegerField(required=False, default=0, min_value=-1200, max_value=1200)
    yearOffset = serializers.IntegerField(required=False, default=0, min_value=-100, max_value=100)


class DashboardViewSet(viewsets.ViewSet):
    """
    ViewSet for dashboard reads. Admin only, never writes.
    """
    permission_classes = [IsAuthenticated, IsAdmin]

    @action(detail=False, methods=['get'])
    def stats(self, request):
        params = OffsetSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        bookings = AssignmentRepository().get_queryset().order_by('start_date')
        return Response(dashboard_stats(
            bookings,
            now=timezone.now(),
            tz=timezone.get_current_timezone(),
            month_offset=params.validated_data['monthOffset'],
            year_offset=params.validated_data['yearOffset'],
        ))

    @action(detail=False, methods=['get'])
    def summary(self, request):
        rooms = RoomRepository().get_all().aggregate(
            total_rooms=Count('id'),
            available_rooms=Count('id', filter=Q(status=RoomStatus.AVAILABLE)),
            occupied_rooms=Count('id', filter=Q(status=RoomStatus.OCCUPIED)),
            maintenance_rooms=Count('id', filter=Q(status=RoomStatus.MAINTENANCE)),
            total_capacity=Sum('capacity'),
            total_occupied=Sum('occupied'),
        )
        capacity = rooms['total_capacity'] or 0
        occupied = rooms['total_occupied'] or 0

        bookings = AssignmentRepository().get_all().aggregate(
            pending_bookings=Count('id', filter=Q(status=AssignmentStatus.PENDING)),
            active_bookings=Count('id', filter=Q(status__in=AssignmentStatus.OCCUPYING)),
        )

        return Response({
            **rooms,
            'total_capacity': capacity,
            'total_occupied': occupied,
            'occupancy_rate': round(occupied / capacity * 100, 1) if capacity else 0.0,
            **bookings,
            'total_tenants': UserRepository().tenants().count(),
        })
