from rest_framework import viewsets, status, mixins
from rest_framework.decorators import action
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from api.permissions import IsAdmin, IsAdminOrOwner, IsNotBlocked
from core.dto import AssignmentRequestDTO
from .serializers import (
    RoomAssignmentSerializer,
    RoomAssignmentListSerializer,
    AssignmentCreateSerializer,
    AssignmentStatusSerializer,
    TransactionRangeSerializer,
)
from .services import AssignmentService


class RoomAssignmentViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    ViewSet for room bookings.
    Tenants request and check out, admins approve, reject and review.
    """
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    lookup_value_regex = r'\d+'
    owner_field = 'requested_by'
    search_fields = ['reference_number', 'requested_by__name', 'requested_by__email', 'room__number']
    ordering_fields = ['created_at', 'start_date', 'status', 'total_price']
    ordering = ['-created_at']

    admin_actions = {'update', 'partial_update', 'destroy', 'pending', 'print_transactions'}

    def get_permissions(self):
        if self.action in self.admin_actions:
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated(), IsNotBlocked(), IsAdminOrOwner()]

    def get_serializer_class(self):
        if self.action == 'list':
            return RoomAssignmentListSerializer
        return RoomAssignmentSerializer

    def get_queryset(self):
        queryset = AssignmentService().list_for(self.request.user)
        booking_status = self.request.query_params.get('status')
        if booking_status:
            queryset = queryset.filter(status=booking_status)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = AssignmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        id_image = request.FILES.get('id_image') or request.FILES.get('idImage')
        dto = AssignmentRequestDTO(id_image=id_image, **serializer.validated_data)
        assignment = AssignmentService().create_assignment(request.user, dto)
        return Response(RoomAssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = AssignmentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignment = AssignmentService().update_status(
            request.user, kwargs['pk'], serializer.validated_data['status'],
            notes=serializer.validated_data.get('notes'),
        )
        return Response(RoomAssignmentSerializer(assignment).data)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        AssignmentService().delete_assignment(kwargs['pk'])
        return Response({'message': 'Assignment removed'})

    @action(detail=False, methods=['get'])
    def pending(self, request):
        queryset = AssignmentService().assignments.pending()
        return Response(RoomAssignmentSerializer(queryset, many=True).data)

    @action(detail=True, methods=['post', 'put'])
    def checkout(self, request, pk=None):
        assignment, message = AssignmentService().checkout(request.user, pk)
        return Response({'message': message, 'assignment': RoomAssignmentSerializer(assignment).data})

    @action(detail=False, methods=['get'], url_path='print/transactions')
    def print_transactions(self, request):
        serializer = TransactionRangeSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        result = AssignmentService().print_transactions(
            serializer.validated_data.get('startDate'), serializer.validated_data.get('endDate')
        )
        return Response({'success': True, **result})
