# events/throttles.py

from rest_framework.permissions import SAFE_METHODS
from rest_framework.throttling import ScopedRateThrottle


class WriteScopedRateThrottle(ScopedRateThrottle):
    """
    ScopedRateThrottle that only counts writes, for views whose GET is a
    public listing (e.g. EventListCreateView).

    Scope comes from the view's `throttle_scope`; the cache key is the
    user id, or the client address for anonymous callers.
    """

    def allow_request(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return super().allow_request(request, view)
