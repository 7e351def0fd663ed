"""
Report Views
Operations commission and operations daily report endpoints.
"""
import logging

from django.http import HttpResponse
from rest_framework import status

from estate_backend.api import EnvelopeAPIView, success_response
from users.serializers import OperationsUserSerializer

from .exceptions import ReportError, ValidationError
from .exporters import (
    PDF_CONTENT_TYPE, XLSX_CONTENT_TYPE,
    commission_filename, daily_filename,
    export_commission_report_to_excel, export_commission_report_to_pdf,
    export_daily_report_to_excel, export_daily_report_to_pdf,
)
from .permissions import CanManageReports, CanViewDailyReports
from .serializers import (
    CommissionCreateSerializer, CommissionListSerializer, CommissionReportDetailSerializer,
    CommissionReportSerializer, CommissionUpdateSerializer,
    DailyCreateSerializer, DailyListSerializer, DailyReportSerializer, DailyUpdateSerializer,
)
from .services import CommissionReportService, DailyReportService
from .throttling import ReportsExportThrottle

logger = logging.getLogger(__name__)


def file_response(content: bytes, content_type: str, filename: str) -> HttpResponse:
    response = HttpResponse(content, content_type=content_type)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


class ReportAPIView(EnvelopeAPIView):
    """Base view with report error handling."""
    domain_error = ReportError


# =============================================================================
# Operations Commission
# =============================================================================

class CommissionAPIView(ReportAPIView):
    permission_classes = [CanManageReports]


class CommissionReportListView(CommissionAPIView):
    """GET/POST /api/operations-commission/monthly/"""

    def get(self, request):
        self.error_context = 'fetching operations commission reports'
        serializer = CommissionListSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        reports = CommissionReportService.get_all(serializer.validated_data)
        return success_response(CommissionReportSerializer(reports, many=True).data)

    def post(self, request):
        self.error_context = 'creating operations commission report'
        serializer = CommissionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        report = CommissionReportService.create(params.get('start_date'), params.get('end_date'))
        return success_response(
            CommissionReportDetailSerializer(report).data,
            message='Operations commission report created successfully',
            status_code=status.HTTP_201_CREATED
        )


class CommissionReportDetailView(CommissionAPIView):
    """GET/PUT/DELETE /api/operations-commission/monthly/{id}/"""

    def get(self, request, pk):
        self.error_context = f'fetching operations commission report {pk}'
        report = CommissionReportService.get_by_id(pk)
        return success_response(CommissionReportDetailSerializer(report).data)

    def put(self, request, pk):
        self.error_context = f'updating operations commission report {pk}'
        serializer = CommissionUpdateSerializer(data=request.data)
        missing = [
            name for name in serializer.fields
            if request.data.get(name) in (None, '')
        ]
        if missing:
            raise ValidationError('All fields are required', missing_fields=missing)
        serializer.is_valid(raise_exception=True)

        report = CommissionReportService.update(pk, serializer.validated_data)
        return success_response(
            CommissionReportDetailSerializer(report).data,
            message='Operations commission report updated successfully'
        )

    def delete(self, request, pk):
        self.error_context = f'deleting operations commission report {pk}'
        report = CommissionReportService.delete(pk)
        return success_response(
            CommissionReportSerializer(report).data,
            message='Operations commission report deleted successfully'
        )


class CommissionReportRecalculateView(CommissionAPIView):
    """POST /api/operations-commission/monthly/{id}/recalculate/"""

    def post(self, request, pk):
        self.error_context = f'recalculating operations commission report {pk}'
        report = CommissionReportService.recalculate(pk)
        return success_response(
            CommissionReportDetailSerializer(report).data,
            message='Operations commission report recalculated successfully'
        )


class CommissionReportExcelView(CommissionAPIView):
    """GET /api/operations-commission/monthly/{id}/export/excel/"""
    throttle_classes = [ReportsExportThrottle]

    def get(self, request, pk):
        self.error_context = f'exporting operations commission report {pk} to Excel'
        report = CommissionReportService.get_by_id(pk)
        content = export_commission_report_to_excel(report, report.properties)
        logger.info(f"Operations commission report {pk} exported to Excel by user {request.user.pk}")
        return file_response(content, XLSX_CONTENT_TYPE, commission_filename(report, 'xlsx'))


class CommissionReportPdfView(CommissionAPIView):
    """GET /api/operations-commission/monthly/{id}/export/pdf/"""
    throttle_classes = [ReportsExportThrottle]

    def get(self, request, pk):
        self.error_context = f'exporting operations commission report {pk} to PDF'
        report = CommissionReportService.get_by_id(pk)
        content = export_commission_report_to_pdf(report, report.properties)
        logger.info(f"Operations commission report {pk} exported to PDF by user {request.user.pk}")
        return file_response(content, PDF_CONTENT_TYPE, commission_filename(report, 'pdf'))


# =============================================================================
# Operations Daily
# =============================================================================

class DailyAPIView(ReportAPIView):
    permission_classes = [CanViewDailyReports]


class DailyReportListView(DailyAPIView):
    """GET/POST /api/operations-daily/"""

    def get(self, request):
        self.error_context = 'fetching operations daily reports'
        serializer = DailyListSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        reports = DailyReportService.get_all(serializer.validated_data)
        return success_response(DailyReportSerializer(reports, many=True).data)

    def post(self, request):
        self.error_context = 'creating operations daily report'
        serializer = DailyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = dict(serializer.validated_data)

        operations_id = params.pop('operations_id', None)
        report_date = params.pop('report_date', None)
        report = DailyReportService.create(operations_id, report_date, params)
        return success_response(
            DailyReportSerializer(report).data,
            message='Operations daily report created successfully',
            status_code=status.HTTP_201_CREATED
        )


class OperationsUsersView(DailyAPIView):
    """GET /api/operations-daily/operations-users/"""

    def get(self, request):
        self.error_context = 'fetching operations users'
        users = DailyReportService.get_operations_users()
        return success_response(OperationsUserSerializer(users, many=True).data)


class DailyReportDetailView(DailyAPIView):
    """GET/PUT/DELETE /api/operations-daily/{id}/"""

    def get(self, request, pk):
        self.error_context = f'fetching operations daily report {pk}'
        report = DailyReportService.get_by_id(pk)
        return success_response(DailyReportSerializer(report).data)

    def put(self, request, pk):
        self.error_context = f'updating operations daily report {pk}'
        serializer = DailyUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        report = DailyReportService.update(pk, serializer.validated_data)
        return success_response(
            DailyReportSerializer(report).data,
            message='Operations daily report updated successfully'
        )

    def delete(self, request, pk):
        self.error_context = f'deleting operations daily report {pk}'
        report = DailyReportService.delete(pk)
        return success_response(
            DailyReportSerializer(report).data,
            message='Operations daily report deleted successfully'
        )


class DailyReportRecalculateView(DailyAPIView):
    """POST /api/operations-daily/{id}/recalculate/"""

    def post(self, request, pk):
        self.error_context = f'recalculating operations daily report {pk}'
        report = DailyReportService.recalculate(pk)
        return success_response(
            DailyReportSerializer(report).data,
            message='Operations daily report recalculated successfully'
        )


class DailyReportExcelView(DailyAPIView):
    """GET /api/operations-daily/{id}/export/excel/"""
    throttle_classes = [ReportsExportThrottle]

    def get(self, request, pk):
        self.error_context = f'exporting operations daily report {pk} to Excel'
        report = DailyReportService.get_by_id(pk)
        content = export_daily_report_to_excel(report)
        logger.info(f"Operations daily report {pk} exported to Excel by user {request.user.pk}")
        return file_response(content, XLSX_CONTENT_TYPE, daily_filename(report, 'xlsx'))


class DailyReportPdfView(DailyAPIView):
    """GET /api/operations-daily/{id}/export/pdf/"""
    throttle_classes = [ReportsExportThrottle]

    def get(self, request, pk):
        self.error_context = f'exporting operations daily report {pk} to PDF'
        report = DailyReportService.get_by_id(pk)
        content = export_daily_report_to_pdf(report)
        logger.info(f"Operations daily report {pk} exported to PDF by user {request.user.pk}")
        return file_response(content, PDF_CONTENT_TYPE, daily_filename(report, 'pdf'))
