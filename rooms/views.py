from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from api.permissions import IsAdmin, IsNotBlocked
from core.dto import RoomDTO
from .repositories import RoomRepository
from .serializers import RoomSerializer, RoomListSerializer, PublicRoomSerializer, RoomWriteSerializer
from .services import RoomService


class RoomViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Room management.
    Occupancy is never written here, it follows booking status changes.
    """
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    lookup_value_regex = r'\d+'
    search_fields = ['number', 'floor', 'room_type', 'description']
    ordering_fields = ['number', 'floor', 'monthly_rate', 'capacity', 'created_at']
    ordering = ['floor', 'number']

    admin_actions = {'create', 'update', 'partial_update', 'destroy', 'reconcile'}
    public_actions = {'public', 'public_available'}

    def get_permissions(self):
        if self.action in self.public_actions:
            return [AllowAny()]
        if self.action in self.admin_actions:
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated(), IsNotBlocked()]

    def get_serializer_class(self):
        if self.action == 'list':
            return RoomListSerializer
        if self.action in self.public_actions:
            return PublicRoomSerializer
        return RoomSerializer

    def get_queryset(self):
        queryset = RoomRepository().get_queryset().prefetch_related('current_occupants')
        room_status = self.request.query_params.get('status')
        if room_status:
            queryset = queryset.filter(status=room_status)
        floor = self.request.query_params.get('floor')
        if floor:
            queryset = queryset.filter(floor=floor)
        return queryset

    def _dto(self, request, partial):
        serializer = RoomWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        keep_image_ids = data.pop('existing_images', None)
        return RoomDTO(**data), keep_image_ids

    def create(self, request, *args, **kwargs):
        dto, _ = self._dto(request, partial=False)
        room = RoomService().create_room(dto, request.FILES.getlist('images'))
        return Response(RoomSerializer(room).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        dto, keep_image_ids = self._dto(request, partial=True)
        room = RoomService().update_room(kwargs['pk'], dto, keep_image_ids, request.FILES.getlist('images'))
        return Response(RoomSerializer(room).data)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        RoomService().delete_room(kwargs['pk'])
        return Response({'message': 'Room removed'})

    @action(detail=False, methods=['get'])
    def public(self, request):
        rooms = RoomRepository().get_queryset()
        return Response(PublicRoomSerializer(rooms, many=True).data)

    @action(detail=False, methods=['get'], url_path='public/available')
    def public_available(self, request):
        return Response(PublicRoomSerializer(RoomRepository().available(), many=True).data)

    @action(detail=False, methods=['get'])
    def available(self, request):
        return Response(RoomListSerializer(RoomRepository().available(), many=True).data)

    @action(detail=False, methods=['get'], url_path='my-room')
    def my_room(self, request):
        from assignments.serializers import RoomAssignmentSerializer

        current, history = RoomService().my_room(request.user)
        return Response({
            'current_assignment': RoomAssignmentSerializer(current).data if current else None,
            'history': RoomAssignmentSerializer(history, many=True).data,
        })

    @action(detail=False, methods=['post'])
    def reconcile(self, request):
        changed = RoomService().reconcile_occupancy()
        return Response({'message': 'Occupancy reconciled', 'rooms_changed': changed})
