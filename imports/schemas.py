"""
Request/Response schemas for import API endpoints.

Uses Ninja Schema (Pydantic-based) for type validation and serialization.
"""

from datetime import datetime
from typing import Any

from ninja import Field, Schema
from pydantic import field_validator

# ============ Data Sources ============


class DataSourceInfo(Schema):
    """Description of a registered data source."""

    name: str
    title: str
    template: str | None = None


class DataSourceListResponse(Schema):
    """Response for data source listing endpoint."""

    code: int = 200
    message: str = "Success"
    data: list[DataSourceInfo]


# ============ Job Creation ============


class CreateJobRequest(Schema):
    """Request for creating an import job."""

    data_source: str = Field("uploaded_file", min_length=1)
    job_type: str = Field("contact_import", min_length=1, max_length=64)
    submitted_values: dict[str, Any] = Field(default_factory=dict)

    @field_validator("data_source")
    @classmethod
    def normalize_data_source(cls, value: str) -> str:
        return value.strip().lower()


class JobCreatedData(Schema):
    """Job data returned after creation."""

    job_id: str
    status: str
    submitted_values: dict[str, Any]


class CreateJobResponse(Schema):
    """Response for job creation endpoint."""

    code: int = 200
    message: str = "Success"
    data: JobCreatedData


# ============ Data Source Form ============


class DataSourceFormData(Schema):
    """Form fragment for the job's data source."""

    data_source: str
    available_files: list[str]
    upload_message: str
    submittable_fields: list[str]
    default_values: dict[str, Any]
    html: str


class DataSourceFormResponse(Schema):
    """Response for data source form endpoint."""

    code: int = 200
    message: str = "Success"
    data: DataSourceFormData


# ============ Initialize ============


class StagingResultData(Schema):
    """Result of staging the data source's rows."""

    job_id: str
    table_name: str
    number_of_columns: int
    column_headers: list[str]


class InitializeResponse(Schema):
    """Response for initialize endpoint."""

    code: int = 200
    message: str = "Success"
    data: StagingResultData


# ============ Job Status ============


class JobStatusData(Schema):
    """Detailed job status data."""

    job_id: str
    job_type: str
    status: str
    submitted_values: dict[str, Any]
    data_source: dict[str, Any]
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime


class JobStatusResponse(Schema):
    """Response for job status endpoint."""

    code: int = 200
    message: str = "Success"
    data: JobStatusData


# ============ Job List ============


class JobListItem(Schema):
    """Summary item for job list."""

    job_id: str
    job_type: str
    status: str
    table_name: str | None = None
    created_at: datetime


class JobListData(Schema):
    """Job list with pagination."""

    jobs: list[JobListItem]
    total: int
    page: int
    page_size: int


class JobListResponse(Schema):
    """Response for job list endpoint."""

    code: int = 200
    message: str = "Success"
    data: JobListData


# ============ Error Response ============


class ErrorResponse(Schema):
    """Standard error response."""

    code: int
    message: str
    detail: str | None = None
    error_code: str | None = None
    details: dict[str, Any] | None = None
