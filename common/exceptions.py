"""
DRF exception handler.

Renders domain exceptions from core.exceptions and DRF's own errors
with one JSON shape: {"message", "code", "details", "stack"}.
The stack is only included while DEBUG is on.
"""
import logging
import traceback

from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationException

logger = logging.getLogger(__name__)


def _stack(exc):
    if not settings.DEBUG:
        return None
    return ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def _first_message(detail):
    """Pull a readable message out of DRF's nested error detail"""
    if isinstance(detail, dict):
        for key, value in detail.items():
            message = _first_message(value)
            if key in ('detail', 'non_field_errors'):
                return message
            return f"{key}: {message}"
        return ''
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ''
    return str(detail)


def api_exception_handler(exc, context):
    view = context.get('view')
    view_name = view.__class__.__name__ if view else 'unknown'

    if isinstance(exc, BaseApplicationException):
        if exc.status_code >= 500:
            logger.error(f"{view_name}: {exc.code} {exc.message}", exc_info=exc)
        else:
            logger.info(f"{view_name}: {exc.code} {exc.message}")
        return Response({
            'message': exc.message,
            'code': exc.code,
            'details': exc.details,
            'stack': _stack(exc),
        }, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        logger.error(f"Unhandled error in {view_name}: {exc}", exc_info=exc)
        return Response({
            'message': 'Internal server error',
            'code': 'SERVER_ERROR',
            'details': {},
            'stack': _stack(exc),
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, APIException):
        code = exc.get_codes()
        code = code.upper() if isinstance(code, str) else 'VALIDATION_ERROR'
        details = response.data if isinstance(response.data, dict) else {'errors': response.data}
    elif isinstance(exc, Http404):
        code, details = 'NOT_FOUND', {}
    elif isinstance(exc, PermissionDenied):
        code, details = 'FORBIDDEN', {}
    else:
        code, details = 'ERROR', {}

    response.data = {
        'message': _first_message(response.data),
        'code': code,
        'details': details,
        'stack': _stack(exc),
    }
    return response
