"""Django app configuration for the import data sources."""

from django.apps import AppConfig


class ImportsConfig(AppConfig):
    """Registers the bundled data sources once the app registry is ready."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "imports"
    verbose_name = "Import Data Sources"

    def ready(self):
        # Populates DataSourceFactory
        from imports import datasources  # noqa: F401
