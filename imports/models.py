"""
User Job Model - Tracks a multi-step import and the data it has staged.

This model provides:
- Job status tracking (draft, in progress, completed, failed, expired)
- Storage of the values submitted for the selected data source
- Storage of the data source's result (staging table, column headers)
- Lifecycle helpers used by the expiry cleanup
"""

import uuid

from django.conf import settings
from django.db import models

SUBMITTED_VALUES_KEY = "submitted_values"
DATA_SOURCE_KEY = "data_source"


class UserJob(models.Model):
    """
    Import job record.

    Coordinates an import from data-source selection through field mapping.
    The data source writes its staging table name and column information
    onto ``metadata`` so later steps can find the staged rows.

    Attributes:
        job_id: Unique identifier for the job
        user: User who started the import (optional for system imports)
        job_type: Kind of import, e.g. 'contact_import'
        status: Current job status
        metadata: JSON with 'submitted_values' and 'data_source' sections
        error_message: Message of the last failure, if any
        created_at: Job creation timestamp
        updated_at: Last update timestamp
        expires_at: Optional explicit expiry time
    """

    class Status(models.TextChoices):
        """User job status."""

        DRAFT = "draft", "Draft"
        IN_PROGRESS = "in_progress", "In Progress"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"
        EXPIRED = "expired", "Expired"

    # Primary key
    job_id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the import job",
    )

    # User reference (nullable for system imports)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="import_jobs",
        help_text="User who started the import",
    )

    job_type = models.CharField(
        max_length=64,
        default="contact_import",
        help_text="Kind of import this job performs",
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT,
        db_index=True,
        help_text="Current job status",
    )

    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Submitted values and data source results",
    )
    error_message = models.TextField(
        null=True, blank=True, help_text="Error message of the last failure"
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, help_text="Job creation timestamp")
    updated_at = models.DateTimeField(auto_now=True, help_text="Last update timestamp")
    expires_at = models.DateTimeField(null=True, blank=True, help_text="Explicit expiry time")

    class Meta:
        db_table = "import_user_jobs"
        ordering = ["-created_at"]
        verbose_name = "User Job"
        verbose_name_plural = "User Jobs"
        indexes = [
            models.Index(fields=["user", "-created_at"], name="idx_userjob_user_created"),
            models.Index(fields=["status", "-created_at"], name="idx_userjob_status_created"),
        ]

    def __str__(self):
        return f"UserJob({self.job_id}, {self.job_type}, {self.status})"

    def get_submitted_values(self) -> dict:
        """Values submitted for the data source form."""
        return dict(self.metadata.get(SUBMITTED_VALUES_KEY) or {})

    def get_submitted_value(self, name: str, default=None):
        return self.get_submitted_values().get(name, default)

    @property
    def data_source(self) -> dict:
        return dict(self.metadata.get(DATA_SOURCE_KEY) or {})

    @property
    def staging_table_name(self) -> str | None:
        return self.data_source.get("table_name")

    def update_data_source(self, values: dict):
        """Merge values into the data source section and persist them."""
        self.metadata = {**self.metadata, DATA_SOURCE_KEY: {**self.data_source, **values}}
        self.save(update_fields=["metadata", "updated_at"])

    def mark_failed(self, error_message: str):
        """Mark job as failed with error message."""
        self.status = self.Status.FAILED
        self.error_message = error_message
        self.save(update_fields=["status", "error_message", "updated_at"])

    def mark_expired(self):
        """Mark job as expired."""
        self.status = self.Status.EXPIRED
        self.save(update_fields=["status", "updated_at"])
