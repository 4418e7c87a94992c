"""
Configuration for the uploaded-file data source.

Values are read from Django settings once and handed to the data source at
construction time, so tests and management commands can pass their own.

Usage:
    >>> from imports.config import LoaderConfig
    >>> config = LoaderConfig.from_settings()
    >>> preview = LoaderConfig(ingest_mode=IngestMode.PREVIEW)
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

SAMPLE_FILES_DIR = Path(__file__).resolve().parent / "sample_files"
"""Bundled sample data offered when no upload folder is configured."""

FILE_PATTERN = "*.csv"


class IngestMode(str, Enum):
    """How rows are written to the staging table.

    FULL loads every row, one multi-row INSERT per batch.
    PREVIEW loads at most ``preview_row_limit`` rows, one INSERT per row.
    """

    FULL = "full"
    PREVIEW = "preview"


@dataclass(frozen=True)
class LoaderConfig:
    """Loader configuration injected into the uploaded-file data source.

    Attributes:
        upload_folder: Directory users upload files to; None when not set up
        sample_folder: Fallback directory with bundled sample files
        ingest_mode: Full import or bounded preview
        batch_size: Rows per multi-row INSERT in full mode
        preview_row_limit: Maximum rows staged in preview mode
    """

    upload_folder: Path | None = None
    sample_folder: Path = field(default=SAMPLE_FILES_DIR)
    ingest_mode: IngestMode = IngestMode.FULL
    batch_size: int = 10
    preview_row_limit: int = 10

    def __post_init__(self):
        try:
            mode = IngestMode(self.ingest_mode)
        except ValueError:
            valid = [m.value for m in IngestMode]
            raise ImproperlyConfigured(
                f"Invalid import ingest mode: {self.ingest_mode!r}. Expected one of {valid}"
            ) from None
        object.__setattr__(self, "ingest_mode", mode)

        if self.batch_size < 1:
            raise ImproperlyConfigured("Import batch size must be at least 1")
        if self.preview_row_limit < 1:
            raise ImproperlyConfigured("Import preview row limit must be at least 1")
        if self.upload_folder is not None:
            object.__setattr__(self, "upload_folder", Path(self.upload_folder))
        object.__setattr__(self, "sample_folder", Path(self.sample_folder))

    @classmethod
    def from_settings(cls) -> "LoaderConfig":
        """Build the configuration from Django settings."""
        return cls(
            upload_folder=getattr(settings, "IMPORT_UPLOAD_FOLDER", None),
            ingest_mode=getattr(settings, "IMPORT_INGEST_MODE", IngestMode.FULL),
            batch_size=getattr(settings, "IMPORT_BATCH_SIZE", 10),
            preview_row_limit=getattr(settings, "IMPORT_PREVIEW_ROW_LIMIT", 10),
        )

    @property
    def configured_folder(self) -> Path | None:
        """The upload folder, only if it is an existing directory."""
        if self.upload_folder is not None and self.upload_folder.is_dir():
            return self.upload_folder
        return None

    @property
    def has_configured_folder(self) -> bool:
        return self.configured_folder is not None

    @property
    def resolved_folder(self) -> Path:
        """Configured upload folder, falling back to the sample folder."""
        return self.configured_folder or self.sample_folder

    @property
    def rows_per_statement(self) -> int:
        return 1 if self.ingest_mode is IngestMode.PREVIEW else self.batch_size

    @property
    def row_limit(self) -> int | None:
        return self.preview_row_limit if self.ingest_mode is IngestMode.PREVIEW else None
