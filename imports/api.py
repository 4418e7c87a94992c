"""
Import API Endpoints.

Provides REST endpoints for:
- Data source listing
- Job creation with submitted data source values
- Data source form fragments
- Data source initialization (staging the rows)
- Job status and listing
"""

import logging
from uuid import UUID

from django.http import HttpRequest
from ninja import Query, Router
from ninja.errors import HttpError

from .datasources import DataSourceFactory
from .exceptions import (
    CONFIGURATION_ERRORS,
    ImportServiceError,
    UnknownDataSourceError,
    to_error_dict,
)
from .models import UserJob
from .schemas import (
    CreateJobRequest,
    CreateJobResponse,
    DataSourceFormData,
    DataSourceFormResponse,
    DataSourceInfo,
    DataSourceListResponse,
    ErrorResponse,
    InitializeResponse,
    JobCreatedData,
    JobListData,
    JobListItem,
    JobListResponse,
    JobStatusData,
    JobStatusResponse,
    StagingResultData,
)
from .services import create_user_job, get_data_source, initialize_data_source

logger = logging.getLogger(__name__)

# Create router
imports_router = Router(tags=["imports"])


def _get_job(job_id: str) -> UserJob:
    try:
        job_uuid = UUID(job_id)
    except ValueError:
        raise HttpError(400, "Invalid job_id format") from None

    try:
        return UserJob.objects.get(job_id=job_uuid)
    except UserJob.DoesNotExist:
        raise HttpError(404, "Import job not found") from None


def _error_response(status: int, exc: ImportServiceError):
    """Build an ErrorResponse carrying the exception's error code and details."""
    error = to_error_dict(exc)["error"]
    return status, ErrorResponse(
        code=status,
        message=error["message"],
        detail=error["message"],
        error_code=error["code"],
        details=error.get("details"),
    )


@imports_router.get("/datasources", response={200: DataSourceListResponse})
def list_data_sources(request: HttpRequest):
    """List the data sources an import can start from."""
    data_sources = [
        DataSourceInfo(**DataSourceFactory.create(name).get_info())
        for name in DataSourceFactory.list_data_sources()
    ]
    return DataSourceListResponse(code=200, message="Success", data=data_sources)


@imports_router.post("/jobs", response={200: CreateJobResponse, 400: ErrorResponse})
def create_job(request: HttpRequest, payload: CreateJobRequest):
    """
    Create an import job for a data source.

    Only the data source's submittable fields are kept from submitted_values.
    """
    user = request.user if request.user.is_authenticated else None

    try:
        job = create_user_job(
            user, payload.data_source, payload.submitted_values, job_type=payload.job_type
        )
    except UnknownDataSourceError as e:
        return _error_response(400, e)

    return CreateJobResponse(
        code=200,
        message="Import job created",
        data=JobCreatedData(
            job_id=str(job.job_id),
            status=job.status,
            submitted_values=job.get_submitted_values(),
        ),
    )


@imports_router.get(
    "/jobs/{job_id}/form", response={200: DataSourceFormResponse, 400: ErrorResponse, 404: ErrorResponse}
)
def get_data_source_form(request: HttpRequest, job_id: str):
    """
    Get the form fragment for the job's data source.

    Lists the selectable files and any message about where they come from.
    """
    job = _get_job(job_id)

    try:
        data_source = get_data_source(job)
    except UnknownDataSourceError as e:
        return _error_response(400, e)

    form = data_source.build_form()
    return DataSourceFormResponse(
        code=200,
        message="Success",
        data=DataSourceFormData(
            data_source=data_source.name,
            available_files=getattr(form, "available_files", []),
            upload_message=getattr(form, "upload_message", ""),
            submittable_fields=data_source.get_submittable_fields(),
            default_values=data_source.get_default_values(),
            html=form.render_fragment(),
        ),
    )


@imports_router.post(
    "/jobs/{job_id}/initialize",
    response={200: InitializeResponse, 400: ErrorResponse, 404: ErrorResponse, 500: ErrorResponse},
)
def initialize_job(request: HttpRequest, job_id: str):
    """
    Stage the job's data source rows into a new staging table.

    Parse failures are configuration errors the user can fix by picking
    another file (400); unsupported formats are internal errors (500).
    """
    job = _get_job(job_id)
    logger.info(f"[IMPORT API] Initialize called for job {job.job_id}")

    try:
        result = initialize_data_source(job)
    except CONFIGURATION_ERRORS as e:
        return _error_response(400, e)
    except ImportServiceError as e:
        logger.error(f"[IMPORT API] Data source error for job {job.job_id}: {e}")
        return _error_response(500, e)

    return InitializeResponse(
        code=200,
        message="Data staged successfully",
        data=StagingResultData(
            job_id=str(job.job_id),
            table_name=result["table_name"],
            number_of_columns=result["number_of_columns"],
            column_headers=result["column_headers"],
        ),
    )


@imports_router.get("/jobs/{job_id}", response={200: JobStatusResponse, 400: ErrorResponse, 404: ErrorResponse})
def get_job_status(request: HttpRequest, job_id: str):
    """Get import job status and data source results."""
    job = _get_job(job_id)

    return JobStatusResponse(
        code=200,
        message="Success",
        data=JobStatusData(
            job_id=str(job.job_id),
            job_type=job.job_type,
            status=job.status,
            submitted_values=job.get_submitted_values(),
            data_source=job.data_source,
            error_message=job.error_message,
            created_at=job.created_at,
            updated_at=job.updated_at,
        ),
    )


@imports_router.get("/jobs", response={200: JobListResponse})
def list_jobs(
    request: HttpRequest,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    """
    List import jobs for the current user.

    Returns paginated list of jobs ordered by creation date (newest first).
    """
    queryset = UserJob.objects.all()

    # Filter by user if authenticated
    if request.user.is_authenticated:
        queryset = queryset.filter(user=request.user)
    else:
        queryset = queryset.filter(user__isnull=True)

    total = queryset.count()

    offset = (page - 1) * page_size
    jobs = queryset[offset : offset + page_size]

    job_items = [
        JobListItem(
            job_id=str(j.job_id),
            job_type=j.job_type,
            status=j.status,
            table_name=j.staging_table_name,
            created_at=j.created_at,
        )
        for j in jobs
    ]

    return JobListResponse(
        code=200,
        message="Success",
        data=JobListData(
            jobs=job_items,
            total=total,
            page=page,
            page_size=page_size,
        ),
    )
