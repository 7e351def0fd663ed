"""
Notification Throttling
"""
from rest_framework.throttling import UserRateThrottle


class NotificationsInboxThrottle(UserRateThrottle):
    """Throttle for per-user notification endpoints: 60 requests/minute."""
    scope = 'notifications_inbox'
    rate = '60/min'


class NotificationsAdminThrottle(UserRateThrottle):
    """Throttle for maintenance endpoints: 30 requests/minute."""
    scope = 'notifications_admin'
    rate = '30/min'
