"""Django admin configuration for imports module."""

from django.contrib import admin

from .models import UserJob


@admin.register(UserJob)
class UserJobAdmin(admin.ModelAdmin):
    """Admin interface for UserJob model."""

    list_display = [
        "job_id",
        "job_type",
        "status",
        "staging_table",
        "created_at",
    ]
    list_filter = ["status", "job_type", "created_at"]
    search_fields = ["job_id", "job_type"]
    readonly_fields = [
        "job_id",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    fieldsets = [
        ("Job Information", {"fields": ["job_id", "user", "job_type"]}),
        ("Status", {"fields": ["status", "error_message", "expires_at"]}),
        ("Metadata", {"fields": ["metadata"], "classes": ["collapse"]}),
        ("Timestamps", {"fields": ["created_at", "updated_at"]}),
    ]

    @admin.display(description="Staging table")
    def staging_table(self, obj):
        return obj.staging_table_name or "-"
