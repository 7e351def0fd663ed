"""
Property Throttling
"""
from rest_framework.throttling import SimpleRateThrottle


class PropertyUpdateRateThrottle(SimpleRateThrottle):
    """
    Property updates: 10 requests/minute per client IP.
    Counters live in the Django cache and expire with the window.
    """
    scope = 'property_update'
    rate = '10/min'

    def get_cache_key(self, request, view):
        return self.cache_format % {
            'scope': self.scope,
            'ident': self.get_ident(request)
        }
