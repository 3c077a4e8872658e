"""
Health check endpoints for operations monitoring.

Endpoints:
- /_health/live    - liveness probe (is the process running?)
- /_health/ready   - readiness probe (can we reach the database?)
- /_health/full    - full report including broker and ledger setup
"""
import logging
import time
from typing import Dict, Any

from django.conf import settings
from django.db import connections
from django.http import JsonResponse
from django.views import View

logger = logging.getLogger(__name__)


class HealthCheck:
    """Health check implementation."""

    @staticmethod
    def check_database(alias: str = "default") -> Dict[str, Any]:
        """Check database connectivity."""
        start = time.time()
        try:
            conn = connections[alias]
            conn.ensure_connection()
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
            duration_ms = (time.time() - start) * 1000
            return {
                "status": "healthy",
                "alias": alias,
                "duration_ms": round(duration_ms, 2),
            }
        except Exception as e:
            logger.error(f"Database health check failed for {alias}: {e}")
            duration_ms = (time.time() - start) * 1000
            return {
                "status": "unhealthy",
                "alias": alias,
                "error": str(e),
                "duration_ms": round(duration_ms, 2),
            }

    @staticmethod
    def check_broker() -> Dict[str, Any]:
        """Check the Celery broker (Redis) if one is configured."""
        broker_url = getattr(settings, "CELERY_BROKER_URL", None)
        if not broker_url or getattr(settings, "CELERY_TASK_ALWAYS_EAGER", False):
            return {"status": "skipped", "reason": "Broker not in use"}

        start = time.time()
        try:
            import redis
            client = redis.from_url(broker_url)
            client.ping()
            duration_ms = (time.time() - start) * 1000
            return {"status": "healthy", "duration_ms": round(duration_ms, 2)}
        except Exception as e:
            logger.warning(f"Broker health check failed: {e}")
            return {"status": "unhealthy", "error": str(e)}

    @staticmethod
    def check_ledger_setup() -> Dict[str, Any]:
        """Report business units that cannot post journal entries yet."""
        from accounts.models import BusinessUnit
        from accounting.models import NumberingSeries

        configured = set(
            NumberingSeries.objects.filter(
                document_kind=NumberingSeries.DocumentKind.JOURNAL_ENTRY,
            ).values_list("business_unit_id", flat=True)
        )
        missing = [
            bu.name for bu in BusinessUnit.objects.order_by("name")
            if bu.id not in configured
        ]
        return {
            "status": "healthy" if not missing else "degraded",
            "business_units_without_journal_series": missing[:10],
        }

    @staticmethod
    def get_full_health() -> Dict[str, Any]:
        """Get comprehensive health report."""
        checks = {
            "database": HealthCheck.check_database("default"),
            "broker": HealthCheck.check_broker(),
        }
        if checks["database"]["status"] == "healthy":
            checks["ledger"] = HealthCheck.check_ledger_setup()

        statuses = [c.get("status", "unknown") for c in checks.values()]
        if all(s == "healthy" or s == "skipped" for s in statuses):
            overall = "healthy"
        elif any(s == "unhealthy" for s in statuses):
            overall = "unhealthy"
        else:
            overall = "degraded"

        return {
            "status": overall,
            "checks": checks,
            "version": getattr(settings, "VERSION", "unknown"),
            "environment": "production" if not settings.DEBUG else "development",
        }


class LivenessView(View):
    """
    Liveness probe.

    Returns 200 if the process is running.
    """

    def get(self, request):
        return JsonResponse({"status": "alive"})


class ReadinessView(View):
    """
    Readiness probe.

    Returns 200 if the service can handle traffic.
    """

    def get(self, request):
        db_check = HealthCheck.check_database("default")

        if db_check["status"] == "healthy":
            return JsonResponse({
                "status": "ready",
                "database": db_check,
            })
        return JsonResponse({
            "status": "not_ready",
            "database": db_check,
        }, status=503)


class FullHealthView(View):
    """Full health report. Keep it on the internal network in production."""

    def get(self, request):
        health = HealthCheck.get_full_health()

        status_code = 200 if health["status"] == "healthy" else 503
        return JsonResponse(health, status=status_code)
