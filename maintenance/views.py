from rest_framework import viewsets, status, mixins, filters
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from api.filters import OwnerFilterBackend
from api.permissions import IsAdmin, IsAdminOrOwner, IsNotBlocked
from .serializers import MaintenanceRequestSerializer, MaintenanceCreateSerializer, MaintenanceUpdateSerializer
from .services import MaintenanceService


class MaintenanceRequestViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.DestroyModelMixin,
                                viewsets.GenericViewSet):
    """
    ViewSet for maintenance requests.
    Tenants raise and follow their own requests, admins work them.
    """
    serializer_class = MaintenanceRequestSerializer
    filter_backends = [OwnerFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    lookup_value_regex = r'\d+'
    owner_field = 'requested_by'
    search_fields = ['description', 'room__number', 'requested_by__name']
    ordering_fields = ['created_at', 'priority', 'status']
    ordering = ['-created_at']

    def get_permissions(self):
        if self.action in ('update', 'partial_update', 'destroy'):
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated(), IsNotBlocked(), IsAdminOrOwner()]

    def get_queryset(self):
        queryset = MaintenanceService().requests.get_queryset()
        request_status = self.request.query_params.get('status')
        if request_status:
            queryset = queryset.filter(status=request_status)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = MaintenanceCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        maintenance = MaintenanceService().create_request(
            request.user,
            serializer.validated_data['room_id'],
            serializer.validated_data['description'],
            priority=serializer.validated_data.get('priority'),
        )
        return Response(MaintenanceRequestSerializer(maintenance).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = MaintenanceUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        maintenance = MaintenanceService().update_request(
            request.user, kwargs['pk'],
            status=serializer.validated_data.get('status'),
            assigned_to_id=serializer.validated_data.get('assigned_to'),
            note=serializer.validated_data.get('notes'),
        )
        return Response(MaintenanceRequestSerializer(maintenance).data)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        super().destroy(request, *args, **kwargs)
        return Response({'message': 'Maintenance request removed'})
