"""
Health check endpoints.

- /health/        liveness, the process answers
- /health/ready/  database and cache reachable
- /health/deep/   readiness plus latency and row counts
"""

import time
import logging
from django.http import JsonResponse
from django.db import connection
from django.core.cache import cache
from django.views.decorators.http import require_GET
from django.views.decorators.csrf import csrf_exempt

logger = logging.getLogger(__name__)


def _timed(check):
    """Run a check, returning (ok, latency_ms, error)"""
    start = time.time()
    try:
        check()
    except Exception as e:
        return False, None, str(e)
    return True, round((time.time() - start) * 1000, 2), None


def _check_database():
    with connection.cursor() as cursor:
        cursor.execute('SELECT 1')
        cursor.fetchone()


def _check_cache():
    key = 'health_check_probe'
    cache.set(key, 'ok', 10)
    if cache.get(key) != 'ok':
        raise RuntimeError('read/write failed')
    cache.delete(key)


def _run_checks():
    checks, errors = {}, []
    for name, check in (('database', _check_database), ('cache', _check_cache)):
        ok, latency, error = _timed(check)
        checks[name] = {'status': ok, 'latency_ms': latency}
        if error:
            errors.append(f'{name}: {error}')
            logger.error(f'Health check - {name} error: {error}')
    return checks, errors


@csrf_exempt
@require_GET
def health_check(request):
    return JsonResponse({
        'status': 'healthy',
        'timestamp': time.time(),
    })


@csrf_exempt
@require_GET
def readiness_check(request):
    checks, errors = _run_checks()
    ready = all(c['status'] for c in checks.values())
    return JsonResponse({
        'status': 'ready' if ready else 'not_ready',
        'timestamp': time.time(),
        'checks': {name: c['status'] for name, c in checks.items()},
        'errors': errors or None,
    }, status=200 if ready else 503)


@csrf_exempt
@require_GET
def deep_health_check(request):
    """
    Comprehensive status including model counts.
    Use sparingly as it queries every core table.
    """
    from django.contrib.auth import get_user_model
    from rooms.models import Room
    from assignments.models import RoomAssignment

    checks, errors = _run_checks()
    try:
        checks['models'] = {'status': True, 'details': {
            'users': get_user_model().objects.count(),
            'rooms': Room.objects.count(),
            'assignments': RoomAssignment.objects.count(),
        }}
    except Exception as e:
        checks['models'] = {'status': False, 'details': {}}
        errors.append(f'models: {e}')
        logger.error(f'Deep health check - model error: {e}')

    healthy = checks['database']['status'] and checks['cache']['status']
    return JsonResponse({
        'status': 'healthy' if healthy else 'unhealthy',
        'timestamp': time.time(),
        'checks': checks,
        'errors': errors or None,
    }, status=200 if healthy else 503)


def get_health_urls():
    """
    Returns URL patterns for health endpoints.
        urlpatterns += get_health_urls()
    """
    from django.urls import path

    return [
        path('health/', health_check, name='health_check'),
        path('health/ready/', readiness_check, name='readiness_check'),
        path('health/deep/', deep_health_check, name='deep_health_check'),
    ]
