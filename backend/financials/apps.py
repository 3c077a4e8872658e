"""Financials app configuration."""

from django.apps import AppConfig


class FinancialsConfig(AppConfig):
    """Configuration for the financials app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "financials"
    verbose_name = "Financial Documents"
