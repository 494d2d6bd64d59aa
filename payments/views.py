from rest_framework import viewsets, status, mixins
from rest_framework.decorators import action
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from api.permissions import IsAdmin, IsAdminOrOwner, IsNotBlocked
from .serializers import PaymentSerializer, PaymentSubmitSerializer, PaymentVerifySerializer
from .services import PaymentService


class PaymentViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    ViewSet for booking payments.
    Tenants submit against their own bookings, admins verify or reject.
    """
    serializer_class = PaymentSerializer
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    lookup_value_regex = r'\d+'
    search_fields = ['reference_number', 'assignment__reference_number', 'user__name']
    ordering_fields = ['created_at', 'amount', 'status']
    ordering = ['-created_at']

    def get_permissions(self):
        if self.action == 'verify':
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated(), IsNotBlocked(), IsAdminOrOwner()]

    def get_queryset(self):
        queryset = PaymentService().list_for(self.request.user)
        payment_status = self.request.query_params.get('status')
        if payment_status:
            queryset = queryset.filter(status=payment_status)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = PaymentSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        payment = PaymentService().submit_payment(
            request.user,
            data['assignment_id'],
            amount=data['amount'],
            method=data['method'],
            reference_number=data['reference_number'],
            proof_image=request.FILES.get('proof_image'),
        )
        return Response(
            {'message': 'Payment submitted successfully', 'payment': PaymentSerializer(payment).data},
            status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=['put', 'patch'])
    def verify(self, request, pk=None):
        serializer = PaymentVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = PaymentService().verify_payment(
            request.user, pk, serializer.validated_data['status'],
            remarks=serializer.validated_data.get('remarks'),
        )
        return Response({'message': f'Payment {payment.status}', 'payment': PaymentSerializer(payment).data})
