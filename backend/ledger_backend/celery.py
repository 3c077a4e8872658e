"""
Celery application configuration.

This is the main Celery app for the ledger backend.
It runs background ledger maintenance such as balance verification.

Usage:
    # Start worker
    celery -A ledger_backend worker -l INFO

    # Start beat scheduler (for periodic tasks)
    celery -A ledger_backend beat -l INFO
"""
import os

from celery import Celery

# Set default Django settings
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "ledger_backend.settings")

app = Celery("ledger_backend")

# Load config from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()
