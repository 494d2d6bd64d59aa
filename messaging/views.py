from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from api.permissions import IsAdmin, IsNotBlocked
from .serializers import MessageSerializer, MessageCreateSerializer, ConversationSerializer
from .services import MessageService


class MessageViewSet(viewsets.ViewSet):
    """
    ViewSet for tenant/admin chat.

    GET  /messages/                 own conversation (tenant)
    GET  /messages/{user_id}/       conversation with a tenant (admin)
    GET  /messages/conversations/   one row per tenant (admin)
    PUT  /messages/read/            mark incoming messages read
    """
    lookup_value_regex = r'\d+'

    def get_permissions(self):
        if self.action in ('retrieve', 'conversations'):
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated(), IsNotBlocked()]

    def list(self, request):
        messages = MessageService().conversation_for(request.user, request.query_params.get('user_id'))
        return Response(MessageSerializer(messages, many=True).data)

    def retrieve(self, request, pk=None):
        messages = MessageService().conversation_for(request.user, pk)
        return Response(MessageSerializer(messages, many=True).data)

    def create(self, request):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = MessageService().send_message(
            request.user, serializer.validated_data['content'],
            recipient_id=serializer.validated_data.get('recipient_id'),
        )
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'])
    def conversations(self, request):
        return Response(ConversationSerializer(MessageService().conversations(), many=True).data)

    @action(detail=False, methods=['put', 'post'])
    def read(self, request):
        user_id = request.data.get('user_id') or request.query_params.get('user_id')
        updated = MessageService().mark_read(request.user, user_id)
        return Response({'success': True, 'updated': updated})
