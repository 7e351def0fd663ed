"""
Report Permissions
"""
from rest_framework.permissions import SAFE_METHODS, BasePermission


class CanManageReports(BasePermission):
    """Admins, operations managers and staff."""
    message = 'You do not have permission to manage operations reports.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.can_manage_reports)


class CanViewDailyReports(BasePermission):
    """Report managers, plus read-only access for operations users."""
    message = 'You do not have permission to view operations daily reports.'

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if user.can_manage_reports:
            return True
        return request.method in SAFE_METHODS and user.is_operations
