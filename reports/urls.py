"""
Report URL Configuration
Mounted under /api/operations-commission/ and /api/operations-daily/
"""
from django.urls import path

from .views import (
    CommissionReportDetailView,
    CommissionReportExcelView,
    CommissionReportListView,
    CommissionReportPdfView,
    CommissionReportRecalculateView,
    DailyReportDetailView,
    DailyReportExcelView,
    DailyReportListView,
    DailyReportPdfView,
    DailyReportRecalculateView,
    OperationsUsersView,
)

commission_urlpatterns = [
    path('monthly/', CommissionReportListView.as_view(), name='commission-report-list'),
    path('monthly/<int:pk>/', CommissionReportDetailView.as_view(), name='commission-report-detail'),
    path('monthly/<int:pk>/recalculate/', CommissionReportRecalculateView.as_view(), name='commission-report-recalculate'),
    path('monthly/<int:pk>/export/excel/', CommissionReportExcelView.as_view(), name='commission-report-export-excel'),
    path('monthly/<int:pk>/export/pdf/', CommissionReportPdfView.as_view(), name='commission-report-export-pdf'),
]

daily_urlpatterns = [
    path('', DailyReportListView.as_view(), name='daily-report-list'),
    path('operations-users/', OperationsUsersView.as_view(), name='daily-report-operations-users'),
    path('<int:pk>/', DailyReportDetailView.as_view(), name='daily-report-detail'),
    path('<int:pk>/recalculate/', DailyReportRecalculateView.as_view(), name='daily-report-recalculate'),
    path('<int:pk>/export/excel/', DailyReportExcelView.as_view(), name='daily-report-export-excel'),
    path('<int:pk>/export/pdf/', DailyReportPdfView.as_view(), name='daily-report-export-pdf'),
]
