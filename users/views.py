from rest_framework import viewsets, status, mixins
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from api.permissions import IsAdmin, IsSuperAdmin, IsNotBlocked
from api.throttling import CodeRequestThrottle
from core.constants import ApprovalStatus
from .repositories import UserRepository
from .serializers import (
    UserSerializer,
    RegistrationSerializer,
    LoginSerializer,
    VerifyCodeSerializer,
    UserIdSerializer,
    EmailSerializer,
    PasswordResetSerializer,
    ApprovalStatusSerializer,
    AdminBootstrapSerializer,
    AdminCreateSerializer,
    AdminUpdateSerializer,
)
from .services import UserService, issue_token


def _validated(serializer_class, request):
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _with_token(user, **extra):
    return {**UserSerializer(user).data, 'token': issue_token(user), **extra}


class UserViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.DestroyModelMixin,
                  viewsets.GenericViewSet):
    """
    Tenant accounts: registration, verification, login, password reset
    and admin approval/blocking.
    """
    serializer_class = UserSerializer
    lookup_value_regex = r'\d+'
    search_fields = ['name', 'email', 'user_code', 'mobile_number']
    ordering_fields = ['created_at', 'name']
    ordering = ['-created_at']

    public_actions = {
        'request_verification', 'verify_email', 'resend_verification', 'register', 'login',
        'create_admin', 'request_password_reset', 'verify_password_reset_code',
        'verify_password_reset', 'resend_password_reset',
    }
    throttled_actions = {
        'request_verification': 'verification',
        'resend_verification': 'verification',
        'request_password_reset': 'password_reset',
        'resend_password_reset': 'password_reset',
    }

    def get_permissions(self):
        if self.action in self.public_actions:
            return [AllowAny()]
        if self.action == 'profile':
            return [IsAuthenticated(), IsNotBlocked()]
        return [IsAuthenticated(), IsAdmin()]

    def get_throttles(self):
        scope = self.throttled_actions.get(self.action)
        if scope:
            self.throttle_scope = scope
            return [CodeRequestThrottle()]
        return super().get_throttles()

    def get_queryset(self):
        return UserRepository().tenants()

    def destroy(self, request, *args, **kwargs):
        UserService().delete_tenant(kwargs['pk'])
        return Response({'message': 'User removed'}, status=status.HTTP_200_OK)

    # Registration

    @action(detail=False, methods=['post'], url_path='request-verification')
    def request_verification(self, request):
        data = _validated(RegistrationSerializer, request)
        user = UserService().request_verification(**data)
        return Response({
            'message': 'Verification code sent to your email. Please verify to complete registration.',
            'email': user.email,
            'user_id': user.id,
            'requires_verification': True,
        })

    @action(detail=False, methods=['post'], url_path='verify-email')
    def verify_email(self, request):
        data = _validated(VerifyCodeSerializer, request)
        user = UserService().verify_email(data['user_id'], data['code'])
        return Response(_with_token(user, message='Email verified. Your account is pending admin approval.'))

    @action(detail=False, methods=['post'], url_path='resend-verification')
    def resend_verification(self, request):
        data = _validated(UserIdSerializer, request)
        user = UserService().resend_verification(data['user_id'])
        return Response({'message': 'New verification code sent to your email', 'email': user.email})

    @action(detail=False, methods=['post'])
    def register(self, request):
        data = _validated(RegistrationSerializer, request)
        user = UserService().register(**data)
        return Response(_with_token(user), status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'])
    def login(self, request):
        data = _validated(LoginSerializer, request)
        user = UserService().authenticate(data['email'], data['password'])
        return Response(_with_token(user))

    @action(detail=False, methods=['post'], url_path='create-admin')
    def create_admin(self, request):
        data = _validated(AdminBootstrapSerializer, request)
        admin = UserService().bootstrap_admin(**data)
        return Response(_with_token(admin), status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'])
    def profile(self, request):
        return Response(UserSerializer(request.user).data)

    # Password reset

    @action(detail=False, methods=['post'], url_path='request-password-reset')
    def request_password_reset(self, request):
        data = _validated(EmailSerializer, request)
        user = UserService().request_password_reset(data['email'])
        return Response({
            'message': 'Password reset code sent to your email. Check your inbox.',
            'email': user.email,
            'user_id': user.id,
        })

    @action(detail=False, methods=['post'], url_path='verify-password-reset-code')
    def verify_password_reset_code(self, request):
        data = _validated(VerifyCodeSerializer, request)
        UserService().check_reset_code(data['user_id'], data['code'])
        return Response({'message': 'Reset code verified. You can now set a new password.', 'verified': True})

    @action(detail=False, methods=['post'], url_path='verify-password-reset')
    def verify_password_reset(self, request):
        data = _validated(PasswordResetSerializer, request)
        user = UserService().reset_password(data['user_id'], data['code'], data['new_password'])
        return Response({'message': 'Password reset successfully. You can now log in.', 'email': user.email})

    @action(detail=False, methods=['post'], url_path='resend-password-reset')
    def resend_password_reset(self, request):
        data = _validated(UserIdSerializer, request)
        user = UserService().resend_password_reset(data['user_id'])
        return Response({'message': 'New reset code sent to your email', 'email': user.email})

    # Admin approval

    @action(detail=False, methods=['get'], url_path='pending-approvals')
    def pending_approvals(self, request):
        queryset = self.get_queryset().filter(approval_status=ApprovalStatus.PENDING)
        return Response(UserSerializer(queryset, many=True).data)

    @action(detail=True, methods=['put', 'patch'], url_path='status')
    def set_status(self, request, pk=None):
        data = _validated(ApprovalStatusSerializer, request)
        user = UserService().set_approval_status(pk, data['status'])
        return Response(UserSerializer(user).data)

    @action(detail=True, methods=['put', 'post'])
    def block(self, request, pk=None):
        user = UserService().set_blocked(pk, True)
        return Response({'message': 'User blocked successfully', 'user': UserSerializer(user).data})

    @action(detail=True, methods=['put', 'post'])
    def unblock(self, request, pk=None):
        user = UserService().set_blocked(pk, False)
        return Response({'message': 'User unblocked successfully', 'user': UserSerializer(user).data})


class AdminViewSet(viewsets.ViewSet):
    """Admin accounts. Only the super admin creates, edits or deletes them"""
    lookup_value_regex = r'\d+'

    def get_permissions(self):
        if self.action == 'list':
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated(), IsSuperAdmin()]

    def list(self, request):
        return Response(UserSerializer(UserRepository().admins(), many=True).data)

    def create(self, request):
        data = _validated(AdminCreateSerializer, request)
        admin = UserService().create_admin(request.user, **data)
        return Response(UserSerializer(admin).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        data = _validated(AdminUpdateSerializer, request)
        admin = UserService().update_admin(request.user, pk, **data)
        return Response({'message': 'Admin updated successfully', 'admin': UserSerializer(admin).data})

    def update(self, request, pk=None):
        return self.partial_update(request, pk)

    def destroy(self, request, pk=None):
        UserService().delete_admin(request.user, int(pk))
        return Response({'message': 'Admin account deleted successfully'})
