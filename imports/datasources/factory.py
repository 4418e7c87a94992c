"""
Data Source Factory - Registers data sources and creates them for jobs.

Usage:
    # Create the data source selected for a job
    data_source = DataSourceFactory.create("uploaded_file", user_job)

    # Register another data source
    DataSourceFactory.register("sql_query", SqlQueryDataSource)

    # List available data sources
    names = DataSourceFactory.list_data_sources()
"""

import logging
from typing import Any, Type

from imports.exceptions import UnknownDataSourceError
from imports.models import UserJob

from .base import DataSource

logger = logging.getLogger(__name__)


class DataSourceFactory:
    """Factory for registering and instantiating data sources."""

    _data_sources: dict[str, Type[DataSource]] = {}

    @classmethod
    def register(cls, name: str, data_source_class: Type[DataSource]) -> None:
        """
        Register a data source class.

        Args:
            name: Data source identifier (e.g., "uploaded_file")
            data_source_class: Class implementing DataSource
        """
        normalized_name = name.lower()
        if cls.is_registered(normalized_name):
            logger.warning(f"Replacing registered data source: {normalized_name}")
        cls._data_sources[normalized_name] = data_source_class
        logger.debug(f"Registered data source: {normalized_name}")

    @classmethod
    def create(cls, name: str, user_job: UserJob | None = None, **kwargs: Any) -> DataSource:
        """
        Create a data source instance for a job.

        Args:
            name: Registered data source identifier
            user_job: Job the data source reads from and writes to
            **kwargs: Extra constructor arguments (e.g., config)

        Raises:
            UnknownDataSourceError: If the name is not registered
        """
        data_source_class = cls.get_data_source_class(name)
        if data_source_class is None:
            raise UnknownDataSourceError(name, cls.list_data_sources())
        return data_source_class(user_job, **kwargs)

    @classmethod
    def list_data_sources(cls) -> list[str]:
        return sorted(cls._data_sources.keys())

    @classmethod
    def get_data_source_class(cls, name: str) -> Type[DataSource] | None:
        return cls._data_sources.get(name.lower())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name.lower() in cls._data_sources
