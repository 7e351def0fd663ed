"""
Report Throttling
"""
from rest_framework.throttling import UserRateThrottle


class ReportsExportThrottle(UserRateThrottle):
    """Throttle for report exports: 10 requests/minute."""
    scope = 'reports_export'
    rate = '10/min'
