from rest_framework import viewsets, status, mixins, filters
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from api.filters import OwnerFilterBackend
from api.permissions import IsAdmin, IsAdminOrOwner, IsNotBlocked
from .serializers import ReportSerializer, ReportCreateSerializer, ReportUpdateSerializer
from .services import ReportService


class ReportViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.DestroyModelMixin,
                    viewsets.GenericViewSet):
    """
    ViewSet for tenant reports.
    Tenants submit and read their own, admins review every report.
    """
    serializer_class = ReportSerializer
    filter_backends = [OwnerFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    lookup_value_regex = r'\d+'
    search_fields = ['title', 'description', 'user__name']
    ordering_fields = ['created_at', 'status', 'category']
    ordering = ['-created_at']

    def get_permissions(self):
        if self.action in ('list', 'update', 'partial_update', 'destroy'):
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated(), IsNotBlocked(), IsAdminOrOwner()]

    def get_queryset(self):
        queryset = ReportService().reports.get_queryset()
        report_status = self.request.query_params.get('status')
        if report_status:
            queryset = queryset.filter(status=report_status)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = ReportCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = ReportService().submit_report(request.user, **serializer.validated_data)
        return Response(
            {'message': 'Report submitted successfully', 'data': ReportSerializer(report).data},
            status=status.HTTP_201_CREATED
        )

    @action(detail=False, methods=['get'], url_path='my-reports')
    def my_reports(self, request):
        reports = ReportService().reports.for_user(request.user)
        return Response(ReportSerializer(reports, many=True).data)

    def update(self, request, *args, **kwargs):
        serializer = ReportUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = ReportService().update_report(
            request.user, kwargs['pk'], serializer.validated_data['status'],
            admin_remarks=serializer.validated_data.get('admin_remarks'),
        )
        return Response({'message': 'Report updated successfully', 'data': ReportSerializer(report).data})

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        super().destroy(request, *args, **kwargs)
        return Response({'message': 'Report deleted successfully'})
