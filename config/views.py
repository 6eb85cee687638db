from django.db import connection
from django.db.utils import DatabaseError
from django.http import JsonResponse
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)


def health_check(request):
    """Liveness check; reports whether the database answers."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        database = 'ok'
    except DatabaseError as e:
        logger.error("Health check database failure: %s", e)
        database = 'unavailable'

    return JsonResponse({
        'status': 'ok' if database == 'ok' else 'degraded',
        'database': database,
        'timestamp': timezone.now().isoformat(),
    }, status=200 if database == 'ok' else 503)


def error_404(request, exception):
    """Custom 404 handler."""
    return JsonResponse({
        'error': 'Not found',
        'status': 404
    }, status=404)


def error_500(request):
    """Custom 500 handler."""
    return JsonResponse({
        'error': 'Internal server error',
        'status': 500
    }, status=500)
