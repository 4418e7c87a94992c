"""
Base Data Source - Abstract interface for all import data sources.

A data source gets the user's raw rows into a staging table. The import job
then maps staged columns onto CRM fields regardless of where the rows came
from, so every data source exposes the same four operations.
"""

from abc import ABC, abstractmethod
from typing import Any

from django import forms

from imports.models import UserJob


class DataSource(ABC):
    """
    Abstract base class for import data sources.

    Attributes:
        name: Unique identifier stored on the job (e.g., "uploaded_file")
        title: Human-readable name for the data source picker
        template: Template rendering the data source's form fragment
    """

    name: str = "base"
    title: str = "Base data source"
    template: str | None = None

    def __init__(self, user_job: UserJob | None = None):
        self.user_job = user_job

    def get_info(self) -> dict[str, Any]:
        """
        Provide information about the data source.

        Returns:
            Dict with name, title and template
        """
        return {"name": self.name, "title": self.title, "template": self.template}

    @abstractmethod
    def build_form(self, data: dict | None = None) -> forms.Form:
        """
        Build the form fragment collecting this data source's settings.

        Args:
            data: Optional bound data (submitted values)

        Returns:
            Form with every field needed to get the data staged
        """
        pass

    @abstractmethod
    def initialize(self) -> None:
        """
        Stage the data described by the job's submitted values.

        Writes the staging table name and column information onto the job.

        Raises:
            ImportServiceError: The submitted values or the source data are unusable
        """
        pass

    @abstractmethod
    def get_submittable_fields(self) -> list[str]:
        """
        Field names taken from the raw submitted form data and stored on the job.
        """
        pass

    def get_default_values(self) -> dict[str, Any]:
        return {}

    def get_submitted_value(self, name: str, default: Any = None) -> Any:
        if self.user_job is None:
            return default
        return self.user_job.get_submitted_value(name, default)

    def update_user_job_data_source(self, values: dict[str, Any]) -> None:
        """Record the data source's results on the owning job."""
        if self.user_job is None:
            raise RuntimeError(f"{self.__class__.__name__} has no user job to update")
        self.user_job.update_data_source(values)

    def __repr__(self) -> str:
        job_id = self.user_job.job_id if self.user_job else None
        return f"{self.__class__.__name__}(name={self.name}, job={job_id})"
