"""
Import data sources - pluggable ways of getting rows into a staging table.

Supported data sources:
- Uploaded file (CSV picked from the upload folder)
"""

from imports.datasources.base import DataSource
from imports.datasources.factory import DataSourceFactory
from imports.datasources.uploaded_file import UploadedFileDataSource

DataSourceFactory.register(UploadedFileDataSource.name, UploadedFileDataSource)

__all__ = [
    "DataSource",
    "DataSourceFactory",
    "UploadedFileDataSource",
]
