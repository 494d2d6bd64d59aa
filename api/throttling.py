"""
Rate limits for the verification and password reset endpoints.
"""
from itertools import takewhile

from rest_framework.throttling import ScopedRateThrottle

DURATIONS = {'s': 1, 'm': 60, 'h': 3600, 'd': 86400}


class CodeRequestThrottle(ScopedRateThrottle):
    """
    Scoped throttle keyed by the email or user id in the request body,
    falling back to the client address.

    Rates accept a multiplier on the period, e.g. "5/5m" is five requests per five minutes.
    """

    def parse_rate(self, rate):
        if rate is None:
            return (None, None)
        num, period = rate.split('/')
        digits = ''.join(takewhile(str.isdigit, period))
        unit = period[len(digits):][0]
        return (int(num), int(digits or 1) * DURATIONS[unit])

    def get_cache_key(self, request, view):
        data = getattr(request, 'data', None) or {}
        ident = data.get('email') or data.get('userId') or data.get('user_id')
        if ident:
            ident = str(ident).strip().lower()
        else:
            ident = self.get_ident(request)
        return self.cache_format % {'scope': self.scope, 'ident': ident}
