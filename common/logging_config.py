"""
Logging configuration with request ID support
"""
import logging
import threading
import uuid

_local = threading.local()


def get_request_id():
    return getattr(_local, 'request_id', None)


class RequestIDFilter(logging.Filter):
    """
    Logging filter to add request ID to log records
    """
    def filter(self, record):
        if not getattr(record, 'request_id', None):
            record.request_id = get_request_id() or 'N/A'
        return True


class RequestIDMiddleware:
    """
    Attach a short request ID to each request.
    Reuses an incoming X-Request-ID header when the client supplies one.
    """

    header = 'HTTP_X_REQUEST_ID'

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.META.get(self.header) or uuid.uuid4().hex[:8]
        request.request_id = request_id
        _local.request_id = request_id

        try:
            response = self.get_response(request)
        finally:
            _local.request_id = None

        response['X-Request-ID'] = request_id
        return response

    def process_exception(self, request, exception):
        """Log unhandled exceptions with request ID"""
        request_id = getattr(request, 'request_id', 'N/A')
        logging.getLogger('django.request').error(
            f"Unhandled {type(exception).__name__} on {request.method} {request.path}: {exception}",
            exc_info=True,
            extra={'request_id': request_id}
        )
