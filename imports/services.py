"""
Import service - Business logic around import jobs and their data sources.

Provides:
- Job creation with the data source's submitted values
- Data source lookup for a job
- Data source initialization with failure recording
- Expiry cleanup dropping abandoned staging tables
"""

import logging
from datetime import timedelta
from typing import Any

from django.db.models import Q
from django.utils import timezone

from .datasources import DataSource, DataSourceFactory
from .exceptions import ImportServiceError
from .models import UserJob
from .staging import drop_staging_table

logger = logging.getLogger(__name__)

DATA_SOURCE_FIELD = "dataSource"
DEFAULT_JOB_TYPE = "contact_import"


def filter_submitted_values(data_source: DataSource, raw_values: dict[str, Any]) -> dict[str, Any]:
    """Keep only the fields the data source accepts from raw form data."""
    allowed = set(data_source.get_submittable_fields())
    return {key: value for key, value in raw_values.items() if key in allowed}


def create_user_job(
    user,
    data_source_name: str,
    submitted_values: dict[str, Any],
    job_type: str = DEFAULT_JOB_TYPE,
) -> UserJob:
    """
    Create a new import job for a data source.

    Args:
        user: User starting the import (None for system imports)
        data_source_name: Registered data source identifier
        submitted_values: Raw submitted form values
        job_type: Kind of import

    Returns:
        Created UserJob instance

    Raises:
        UnknownDataSourceError: If the data source is not registered
    """
    data_source = DataSourceFactory.create(data_source_name)
    values = filter_submitted_values(data_source, submitted_values)
    values[DATA_SOURCE_FIELD] = data_source.name

    job = UserJob.objects.create(
        user=user,
        job_type=job_type,
        status=UserJob.Status.DRAFT,
        metadata={"submitted_values": values},
    )
    logger.info(f"[IMPORT] Created job {job.job_id} using data source {data_source.name}")
    return job


def get_data_source(job: UserJob, **kwargs: Any) -> DataSource:
    """
    Instantiate the data source selected for a job.

    Raises:
        UnknownDataSourceError: If the job names an unregistered data source
    """
    name = job.get_submitted_value(DATA_SOURCE_FIELD, "")
    return DataSourceFactory.create(name, job, **kwargs)


def initialize_data_source(job: UserJob, **kwargs: Any) -> dict[str, Any]:
    """
    Run the job's data source so its rows are staged.

    The job stays in draft: field mapping has not happened yet.

    Args:
        job: UserJob to initialize
        **kwargs: Extra data source constructor arguments (e.g., config)

    Returns:
        The data source section of the job (table_name, column_headers,
        number_of_columns)

    Raises:
        ImportServiceError: Re-raised after the failure is recorded on the job
    """
    logger.info(f"[IMPORT] Initializing data source for job {job.job_id}")
    try:
        data_source = get_data_source(job, **kwargs)
        data_source.initialize()
    except ImportServiceError as e:
        logger.warning(f"[IMPORT] Data source failed for job {job.job_id}: {e}")
        job.mark_failed(str(e))
        raise

    if job.error_message:
        job.error_message = None
        job.status = UserJob.Status.DRAFT
        job.save(update_fields=["status", "error_message", "updated_at"])

    logger.info(
        f"[IMPORT] Job {job.job_id} staged into {job.staging_table_name} "
        f"({job.data_source.get('number_of_columns')} columns)"
    )
    return job.data_source


def cleanup_expired_jobs(max_age_hours: int = 24, dry_run: bool = False) -> int:
    """
    Expire abandoned jobs and drop their staging tables.

    Draft and failed jobs older than the cutoff, or past their explicit
    expiry time, are marked expired.

    Args:
        max_age_hours: Maximum age in hours before a job is expired
        dry_run: Count the jobs without changing anything

    Returns:
        Number of jobs expired
    """
    now = timezone.now()
    cutoff = now - timedelta(hours=max_age_hours)

    expired_jobs = UserJob.objects.filter(
        status__in=[UserJob.Status.DRAFT, UserJob.Status.FAILED],
    ).filter(Q(created_at__lt=cutoff) | Q(expires_at__lt=now))

    if dry_run:
        return expired_jobs.count()

    cleaned = 0
    for job in expired_jobs:
        table_name = job.staging_table_name
        if table_name:
            drop_staging_table(table_name)
        job.mark_expired()
        cleaned += 1

    logger.info(f"[IMPORT] Expired {cleaned} jobs older than {max_age_hours}h")
    return cleaned
