"""
API URLs for DormHub
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from users.views import UserViewSet, AdminViewSet
from rooms.views import RoomViewSet
from assignments.views import RoomAssignmentViewSet
from payments.views import PaymentViewSet
from maintenance.views import MaintenanceRequestViewSet
from reports.views import ReportViewSet
from messaging.views import MessageViewSet
from dashboard.views import DashboardViewSet
from common.views import SystemSettingsView

# Create router
router = DefaultRouter()
router.register(r'users', UserViewSet, basename='user')
router.register(r'admins', AdminViewSet, basename='admin-account')
router.register(r'rooms', RoomViewSet, basename='room')
router.register(r'assignments', RoomAssignmentViewSet, basename='assignment')
router.register(r'payments', PaymentViewSet, basename='payment')
router.register(r'maintenance', MaintenanceRequestViewSet, basename='maintenance')
router.register(r'reports', ReportViewSet, basename='report')
router.register(r'messages', MessageViewSet, basename='message')
router.register(r'dashboard', DashboardViewSet, basename='dashboard')

urlpatterns = [
    path('settings/', SystemSettingsView.as_view(), name='system-settings'),

    # API routes
    path('', include(router.urls)),
]
