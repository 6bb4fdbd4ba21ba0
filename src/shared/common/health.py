# src/shared/common/health.py
"""
Liveness and readiness checks.

Readiness covers the two things a request can block on: the database
and the storage backend holding course covers and lesson files.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Any, List

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import DatabaseError, connection
from django.urls import path
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"


def _check(name: str, check: Callable[[], None], errors: tuple) -> Dict[str, Any]:
    started = time.perf_counter()
    try:
        check()
    except errors as e:
        logger.error(f"Readiness check {name} failed: {e}")
        return {"name": name, "status": UNHEALTHY, "error": str(e)}
    return {
        "name": name,
        "status": HEALTHY,
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
    }


def _ping_database() -> None:
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _ping_storage() -> None:
    default_storage.exists("health-check")


def run_checks() -> List[Dict[str, Any]]:
    return [
        _check("database", _ping_database, (DatabaseError,)),
        _check("storage", _ping_storage, (OSError,)),
    ]


def _stamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    """Static service identity, used by load balancers."""
    return Response({
        "status": HEALTHY,
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
        "timestamp": _stamp(),
    })


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def liveness_check(request):
    return Response({"status": "alive", "timestamp": _stamp()})


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def readiness_check(request):
    """503 while the database or the file storage is unreachable."""
    checks = run_checks()
    ready = all(check["status"] == HEALTHY for check in checks)

    return Response(
        {
            "status": HEALTHY if ready else UNHEALTHY,
            "checks": checks,
            "timestamp": _stamp(),
        },
        status=200 if ready else 503
    )


def get_health_urlpatterns():
    """Health routes, mounted at the project root by ``config.urls``."""
    return [
        path('health/', health_check, name='health'),
        path('health/live/', liveness_check, name='liveness'),
        path('health/ready/', readiness_check, name='readiness'),
    ]
